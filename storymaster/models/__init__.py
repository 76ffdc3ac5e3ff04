from storymaster.models.document import Document, DocumentVersion

__all__ = ["Document", "DocumentVersion"]
