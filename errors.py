"""Fatal conditions of the pipeline. Recoverable ones are logged, not raised."""


class PipelineError(Exception):
    """Base class for conditions that stop the current stage."""


class CorpusConfigurationError(PipelineError):
    """The input directory is missing or holds no usable files."""

    def __init__(self, path, reason="no input files found"):
        self.path = str(path)
        super().__init__(f"{reason}: {self.path}")


class EmptyCorpusError(PipelineError):
    """The corpus produced no usable documents or terms."""

    def __init__(self, detail="document-term matrix is empty"):
        super().__init__(f"No usable corpus: {detail}")


class NoValidTopicCountError(PipelineError):
    """Every candidate number of topics failed to produce a coherence score."""

    def __init__(self, topic_counts=()):
        self.topic_counts = list(topic_counts)
        super().__init__(f"No valid topic count found among {self.topic_counts}")


class ExportError(PipelineError):
    """An output artifact could not be written."""

    def __init__(self, path, cause=None):
        self.path = str(path)
        message = f"Failed to write {self.path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
