from __future__ import annotations

_CATEGORIES: dict[str, tuple[str, ...]] = {
    'image': ('jpg', 'jpeg', 'png', 'gif', 'webp', 'svg', 'bmp'),
    'video': ('mp4', 'webm', 'mov', 'avi', 'mkv', 'flv'),
    'audio': ('mp3', 'wav', 'ogg', 'aac', 'flac'),
    'document': ('pdf', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx', 'txt', 'rtf', 'md', 'odt'),
    'archive': ('zip', 'rar', '7z', 'tar', 'gz'),
    'code': ('js', 'ts', 'html', 'css', 'json', 'php', 'py', 'java', 'c', 'cpp', 'cs', 'go', 'rb'),
}

EXTENSION_MAP: dict[str, str] = {ext: category for category, exts in _CATEGORIES.items() for ext in exts}


def classify(filename: str) -> str:
    if '.' not in filename:
        return 'file'
    extension = filename.rsplit('.', 1)[1].lower()
    return EXTENSION_MAP.get(extension, 'file')
