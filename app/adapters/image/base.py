from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.schemas.generation import GenerationParams


@dataclass(frozen=True)
class GeneratedImage:
	"""Raw image payload returned by an upstream API."""

	content: bytes
	content_type: str

	@property
	def size(self) -> int:
		return len(self.content)


class AbstractImageClient(ABC):
	"""Interface for clients that turn a prompt into image bytes."""

	@abstractmethod
	async def fetch_image(self, prompt: str, params: GenerationParams) -> GeneratedImage:
		"""Generate an image for an already sanitized prompt.

		Args:
			prompt: Sanitized prompt text (not URL-encoded).
			params: Generation options.

		Returns:
			GeneratedImage: Non-empty image payload and its media type.

		Raises:
			ImageGenerationAppError: For any failure, with the specific cause chained.
		"""
		...
