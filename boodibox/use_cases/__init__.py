"""Application use cases for the upload -> poll -> submit workflow."""

from .upload import UploadFilesUseCase
from .poll import FetchUploadStatusUseCase, PollManyUseCase, PollUploadUseCase
from .submit import SubmitPostUseCase, SubmitPostWithFilesUseCase

__all__ = [
    "UploadFilesUseCase",
    "FetchUploadStatusUseCase",
    "PollUploadUseCase",
    "PollManyUseCase",
    "SubmitPostUseCase",
    "SubmitPostWithFilesUseCase",
]
