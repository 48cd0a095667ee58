"""Script path and user information handling for request URLs."""

from __future__ import annotations

__all__ = ["get_script_path", "split_user_info"]


def get_script_path(path: str, script_name: str) -> str:
    """Determine the path at which the application is mounted.

    Parameters
    ----------
    path
        Path of the request URL.
    script_name
        Path of the front controller as reported by the server.

    Returns
    -------
    str
        The whole path if it equals the script name, ignoring case. Otherwise
        the path is cut after the last ``/`` at or before the end of the
        part it shares with the script name, or ``/`` if they share nothing.

    Examples
    --------
    .. code-block:: python

       >>> get_script_path("/app/index.php/foo", "/app/index.php")
       '/app/index.php/'
       >>> get_script_path("/app/foo", "/other")
       '/'
    """
    lpath = path.lower()
    script = script_name.lower()
    if lpath == script:
        return path

    common = 0
    for a, b in zip(lpath, script, strict=False):
        if a != b:
            break
        common += 1
    if not common:
        return "/"

    slash = path.rfind("/", 0, common + 1)
    if slash < 0:
        return "/"
    return path[: slash + 1]


def split_user_info(user_info: str) -> tuple[str, str]:
    """Split URL user information into user and password.

    Only the first ``:`` separates the two, and the password is empty if
    there is none.
    """
    user, _, password = user_info.partition(":")
    return user, password
