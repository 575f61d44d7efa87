"""Store implementations for app documents and file-system actions."""

from hector.app_runtime.store.base import AppStore, FileStore
from hector.app_runtime.store.local import LocalAppStore, LocalFileStore
from hector.app_runtime.store.s3 import S3AppStore

__all__ = ["AppStore", "FileStore", "LocalAppStore", "LocalFileStore", "S3AppStore"]
