"""TraceGuard: an instrumented five-stage question answering pipeline."""

__version__ = "0.1.0"
