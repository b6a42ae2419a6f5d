"""Format sniffing for diagnostics. Never used to pick a decoder."""

SUPPORTED_FORMATS = ("PNG", "JPEG", "GIF", "BMP", "TIFF", "WebP")

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def detect_format(data):
    """Name of the image format in ``data`` judging by its magic bytes, or None."""
    if not data:
        return None
    head = bytes(data[:12])
    if head.startswith(_PNG_SIGNATURE):
        return "PNG"
    if head.startswith(b"\xff\xd8\xff"):
        return "JPEG"
    if head.startswith((b"GIF87a", b"GIF89a")):
        return "GIF"
    if head.startswith(b"BM"):
        return "BMP"
    if head.startswith((b"II*\x00", b"MM\x00*")):
        return "TIFF"
    if len(head) >= 12 and head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "WebP"
    return None


def analyze_image_header(data):
    """Multi-line human-readable report on a raw image buffer."""
    if not data:
        return "Data is null or empty"

    lines = [f"Data size: {len(data)} bytes"]
    lines.append("Header bytes (hex): " + " ".join(f"{b:02x}" for b in bytes(data[:16])))

    if len(data) < 8:
        lines.append("Format detected: Data too small to determine format")
        return "\n".join(lines) + "\n"

    fmt = detect_format(data)
    if fmt is None:
        lines.append("Format detected: Unknown/Unsupported")
        lines.append("Note: Supported formats are " + ", ".join(SUPPORTED_FORMATS))
    else:
        lines.append(f"Format detected: {fmt}")
    return "\n".join(lines) + "\n"
