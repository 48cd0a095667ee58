"""Tests for script path and user information handling."""

from __future__ import annotations

from clientorigin import get_script_path, split_user_info


def test_script_path_equal() -> None:
    assert get_script_path("/app/index.php", "/app/index.php") == (
        "/app/index.php"
    )
    assert get_script_path("/App/Index.PHP", "/app/index.php") == (
        "/App/Index.PHP"
    )
    assert get_script_path("", "") == ""


def test_script_path_prefix() -> None:
    assert (
        get_script_path("/app/public/index.php/foo", "/app/public/index.php")
        == "/app/public/index.php/"
    )
    assert get_script_path("/app/foo/bar", "/app/index.php") == "/app/"
    assert get_script_path("/APP/foo", "/app/index.php") == "/APP/"
    assert get_script_path("/app", "/app/index.php") == "/"
    assert get_script_path("/application", "/app") == "/"


def test_script_path_nothing_shared() -> None:
    assert get_script_path("/foo", "") == "/"
    assert get_script_path("foo/bar", "/app") == "/"
    assert get_script_path("/foo", "/") == "/"


def test_split_user_info() -> None:
    assert split_user_info("") == ("", "")
    assert split_user_info("user") == ("user", "")
    assert split_user_info("user:pass") == ("user", "pass")
    assert split_user_info("user:pa:ss") == ("user", "pa:ss")
    assert split_user_info(":pass") == ("", "pass")
