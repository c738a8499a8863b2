"""Server side: handler binding, dispatch pipeline, and host apps."""
