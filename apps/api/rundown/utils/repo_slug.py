from urllib.parse import urlparse

def normalize_project_slug(raw: str) -> str:
    """
    Canonical GitHub project slug "owner/name":
    - accepts a bare slug or a github.com URL
    - strips trailing '/'
    - strips '.git'
    - keeps only <owner>/<repo>
    """
    s = raw.strip()

    if "://" in s or s.lower().startswith("github.com/"):
        if "://" not in s:
            s = "https://" + s
        s = urlparse(s).path or ""

    s = s.strip("/")
    if s.endswith(".git"):
        s = s[:-4]

    parts = [p for p in s.split("/") if p]
    return "/".join(parts[:2])


def parse_project_slug(raw: str) -> tuple[str, str]:
    slug = normalize_project_slug(raw)
    parts = slug.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Invalid GitHub project slug (expected owner/name): {raw!r}")
    return parts[0], parts[1]
