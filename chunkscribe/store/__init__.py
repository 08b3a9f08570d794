from .document import DocumentSink, FileDocument, TextDocument

__all__ = ["DocumentSink", "FileDocument", "TextDocument"]
