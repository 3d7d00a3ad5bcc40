from snapsolve.adapters.events.queue_sink import EmittedEvent, QueueEventSink, sse_event

__all__ = ["EmittedEvent", "QueueEventSink", "sse_event"]
