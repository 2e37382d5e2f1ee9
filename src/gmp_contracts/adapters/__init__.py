"""External service adapters: GMPStats API and row sinks."""
