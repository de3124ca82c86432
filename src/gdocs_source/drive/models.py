"""Data models and field names for Google Drive file listings."""

from dataclasses import dataclass

# Drive MIME types
MIME_TYPE_DOCUMENT = "application/vnd.google-apps.document"
MIME_TYPE_FOLDER = "application/vnd.google-apps.folder"

# Drive JSON field names
FIELD_ID = "id"
FIELD_MIME_TYPE = "mimeType"
FIELD_NAME = "name"
FIELD_DESCRIPTION = "description"
FIELD_PARENTS = "parents"
FIELD_FILES = "files"
FIELD_NEXT_PAGE_TOKEN = "nextPageToken"

# Fields requested for every file, extra configured fields are appended.
BASE_FILE_FIELDS = (
    FIELD_ID,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_DESCRIPTION,
    "createdTime",
    "modifiedTime",
    "starred",
    FIELD_PARENTS,
)

# Record keys added by the crawl
RECORD_PATH = "path"
RECORD_BREADCRUMB = "breadcrumb"


@dataclass(frozen=True)
class FolderReference:
    """A folder to list children of.

    Attributes:
        id: Drive file ID of the folder, or None for the virtual root.
        breadcrumb: Display names of the folders from a root down to this one.
        path: Slug path of the folder ("" for a root).
    """

    id: str | None
    breadcrumb: tuple[str, ...] = ()
    path: str = ""

    @property
    def depth(self) -> int:
        return len(self.breadcrumb)
