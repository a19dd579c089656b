from flask import request


def get_page_title(default="Page"):
    """Return a human-friendly page title based on current path."""
    if not request:
        return default
    path = request.path.strip("/")
    if not path:
        return "Dashboard"
    return path.split("/")[0].replace("-", " ").title()


def wants_confirmation(form) -> bool:
    """Destructive actions only proceed with confirm=yes in the form."""
    return (form.get("confirm") or "").strip().lower() == "yes"
