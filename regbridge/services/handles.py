def normalize_handle(handle: str) -> str:
    """'  @Alice ' → 'alice'"""
    return handle.strip().lstrip("@").lower()
