"""Reference implementations of the collaborator store protocols."""

from formkit.stores.filesystem import FileSystemFormStore, FileSystemProfileStore

__all__ = ["FileSystemFormStore", "FileSystemProfileStore"]
