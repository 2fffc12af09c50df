from dataclasses import dataclass


@dataclass(frozen=True)
class PhotoRef:
    url: str | None = None
    name: str | None = None  # uploaded filename

    @property
    def is_empty(self) -> bool:
        return self.url is None and self.name is None


@dataclass(frozen=True)
class PhotoUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"
