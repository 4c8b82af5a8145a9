TAG_PATTERNS = [
    (lambda p: p.startswith("/api/v1/auth/jwt/"), "JWT Authentication"),
    (lambda p: p.startswith("/api/v1/auth/"), "Authentication"),
    (lambda p: p.startswith("/api/v1/categories/") and "/nominees" in p, "Nominees"),
    (lambda p: p.startswith("/api/v1/categories/"), "Categories"),
    (lambda p: p.startswith("/api/v1/nominees/"), "Nominees"),
    (lambda p: p.startswith(("/api/v1/vote/", "/api/v1/votes/")), "Voting"),
    (lambda p: p.startswith("/api/v1/settings/"), "Settings"),
    (lambda p: p.startswith(("/api/v1/admin/", "/api/v1/audit/")), "Administration"),
    (lambda p: p == "/api/v1/schema/", "Meta"),
]


def group_tags(result, generator, request, public):
    """Replace drf-spectacular's path-derived tags with the groups above."""
    for path, operations in result.get("paths", {}).items():
        tag = next((name for pred, name in TAG_PATTERNS if pred(path)), None)
        if tag is None:
            continue
        for op in operations.values():
            op["tags"] = [tag]
    return result
