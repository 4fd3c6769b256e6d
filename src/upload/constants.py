# src/upload/constants.py

MB = 1024 * 1024
KB = 1024

DEFAULT_FOLDER = "shikshaguru"
DEFAULT_MAX_FILE_SIZE = 5 * MB
DEFAULT_QUALITY = 80
TARGET_IMAGE_SIZE = 512 * KB

# Iterative compression schedule
QUALITY_FLOOR = 20
QUALITY_STEP = 10

JPEG = "image/jpeg"
PNG = "image/png"
GIF = "image/gif"
WEBP = "image/webp"
PDF = "application/pdf"
TEXT = "text/plain"
MSWORD = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
OCTET_STREAM = "application/octet-stream"

DEFAULT_ALLOWED_TYPES = [JPEG, PNG, GIF, WEBP, PDF, TEXT]

# Declared types trusted for content without a recognizable signature
DOCUMENT_TYPES = [MSWORD, DOCX]

# Client-declared types accepted before the pipeline sniffs the bytes
REQUEST_ALLOWED_TYPES = [JPEG, PNG, GIF, WEBP, PDF, TEXT, MSWORD, DOCX]

MAX_FILES_PER_REQUEST = 10

MIME_FORMATS = {
    JPEG: "jpg",
    PNG: "png",
    GIF: "gif",
    WEBP: "webp",
    PDF: "pdf",
    TEXT: "txt",
    MSWORD: "doc",
    DOCX: "docx",
    OCTET_STREAM: "bin",
}
