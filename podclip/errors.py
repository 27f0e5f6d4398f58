class PodclipError(Exception):
    """Base class for every failure raised by podclip."""


class InputError(PodclipError, ValueError):
    """Malformed or empty required input. Retrying without fixing it will not help."""


class CollaboratorError(PodclipError, RuntimeError):
    """An external primitive (ffprobe, ffmpeg, renderer) failed."""


class AudioAnalysisError(CollaboratorError):
    pass


class EmptyAudioError(AudioAnalysisError, InputError):
    pass


class RenderError(CollaboratorError):
    pass


class ScoringFailure(PodclipError):
    """A single scoring call failed. Always recovered by the scorer."""
