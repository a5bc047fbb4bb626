from __future__ import annotations

from pathlib import Path

from steam_command_runner.steam.localconfig import (
    LocalConfig,
    create_backup,
    escape_vdf_string,
    generate_default_launch_options,
    is_our_launch_options,
    parse_key_value,
    parse_quoted_key,
    read_localconfig,
    write_localconfig,
)

OLD_LINE = '\t\t\t\t\t\t"LaunchOptions"\t\t"gamemoderun %command%"\n'
APPS_OPEN = '\t\t\t\t"apps"\n\t\t\t\t{\n'


def test_index_only_covers_app_blocks(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    assert config.launch_options == {100: "gamemoderun %command%"}
    assert config.get_launch_options(200) is None
    # "123" lives under "friends", not "apps"
    assert config.get_launch_options(123) is None


def test_replace_existing_value_touches_only_that_line(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    assert config.set_launch_options(100, "X") is True

    expected = localconfig_text.replace(OLD_LINE, '\t\t\t\t\t\t"LaunchOptions"\t\t"X"\n')
    assert config.content == expected
    assert config.get_launch_options(100) == "X"


def test_set_is_idempotent(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    config.set_launch_options(100, "X")
    first = config.content

    assert config.set_launch_options(100, "X") is False
    assert config.content == first


def test_insert_field_into_existing_block(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    config.set_launch_options(200, "Y")

    closing = "\t\t\t\t\t\t}\n\t\t\t\t\t}\n\t\t\t\t}\n"
    expected = localconfig_text.replace(
        closing,
        '\t\t\t\t\t\t}\n\t\t\t\t\t\t"LaunchOptions"\t\t"Y"\n\t\t\t\t\t}\n\t\t\t\t}\n',
    )
    assert config.content == expected
    assert config.get_launch_options(200) == "Y"
    assert config.get_launch_options(100) == "gamemoderun %command%"


def test_new_block_is_indented_and_escaped(localconfig_text: str) -> None:
    value = 'a "q" b\\'
    config = LocalConfig.parse(localconfig_text)
    config.set_launch_options(300, value)

    block = (
        '\t\t\t\t\t"300"\n'
        "\t\t\t\t\t{\n"
        '\t\t\t\t\t\t"LaunchOptions"\t\t"a \\"q\\" b\\\\"\n'
        "\t\t\t\t\t}\n"
    )
    assert config.content == localconfig_text.replace(APPS_OPEN, APPS_OPEN + block)
    assert config.get_launch_options(300) == value


def test_empty_value_deletes_line(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    assert config.set_launch_options(100, "") is True
    assert config.content == localconfig_text.replace(OLD_LINE, "")
    assert config.get_launch_options(100) is None


def test_delete_without_field_or_block_is_noop(localconfig_text: str) -> None:
    config = LocalConfig.parse(localconfig_text)
    assert config.set_launch_options(200, None) is False
    assert config.set_launch_options(999, None) is False
    assert config.content == localconfig_text


def test_crlf_line_endings_preserved(localconfig_text: str) -> None:
    crlf = localconfig_text.replace("\n", "\r\n")
    config = LocalConfig.parse(crlf)
    config.set_launch_options(200, "Y")
    config.set_launch_options(300, "Z")

    assert "\n" not in config.content.replace("\r\n", "")
    assert config.get_launch_options(200) == "Y"
    assert config.get_launch_options(300) == "Z"
    assert config.get_launch_options(100) == "gamemoderun %command%"


def test_no_apps_section_is_noop() -> None:
    text = '"UserLocalConfigStore"\n{\n\t"friends"\n\t{\n\t}\n}\n'
    config = LocalConfig.parse(text)
    assert config.set_launch_options(5, "x") is False
    assert config.content == text


def test_key_match_is_case_insensitive_and_keeps_spelling() -> None:
    text = '"apps"\n{\n\t"7"\n\t{\n\t\t"launchoptions"\t\t"old"\n\t}\n}\n'
    config = LocalConfig.parse(text)
    assert config.get_launch_options(7) == "old"

    config.set_launch_options(7, "new")
    assert '\t\t"launchoptions"\t\t"new"\n' in config.content


def test_parse_helpers() -> None:
    assert parse_quoted_key('\t\t"apps"') == "apps"
    assert parse_quoted_key('"1850570" {') == "1850570"
    assert parse_quoted_key('"key"\t\t"value"') is None
    assert parse_quoted_key("{") is None
    assert parse_key_value('\t"LaunchOptions"\t\t"a \\"b\\" c\\\\d"') == ("LaunchOptions", 'a "b" c\\d')
    assert parse_key_value('"apps"') is None
    assert escape_vdf_string('say "hi" \\o/') == 'say \\"hi\\" \\\\o/'


def test_read_write_preserves_unrelated_bytes(tmp_path: Path, localconfig_text: str) -> None:
    path = tmp_path / "localconfig.vdf"
    raw = localconfig_text.replace("\n", "\r\n").encode("utf-8")
    raw = raw.replace(b'"synchronized"', b'"sync\xffed"')
    path.write_bytes(raw)

    config = read_localconfig(path)
    config.set_launch_options(100, "X")
    write_localconfig(path, config)

    written = path.read_bytes()
    assert written == raw.replace(b'"gamemoderun %command%"', b'"X"')
    assert not (tmp_path / "localconfig.vdf.tmp").exists()


def test_create_backup(tmp_path: Path, localconfig_text: str) -> None:
    path = tmp_path / "localconfig.vdf"
    path.write_text(localconfig_text, encoding="utf-8")

    backup = create_backup(path)
    assert backup == tmp_path / "localconfig.vdf.backup"
    assert backup.read_text(encoding="utf-8") == localconfig_text


def test_is_our_launch_options() -> None:
    assert is_our_launch_options(generate_default_launch_options()) is True
    assert is_our_launch_options("  gamescope -- %command%  ") is True
    assert is_our_launch_options("gamescope $(steam-command-runner gamescope args) -- %command%") is True
    assert is_our_launch_options("gamescope -f -- %command%") is False
    assert is_our_launch_options("gamemoderun %command%") is False


def test_non_decimal_app_key_is_not_an_app() -> None:
    text = (
        '"UserLocalConfigStore"\n{\n\t"apps"\n\t{\n'
        '\t\t"²"\n\t\t{\n\t\t\t"LaunchOptions"\t\t"x"\n\t\t}\n'
        "\t}\n}\n"
    )
    config = LocalConfig.parse(text)
    assert config.launch_options == {}


def test_write_keeps_file_mode(tmp_path: Path, localconfig_text: str) -> None:
    path = tmp_path / "localconfig.vdf"
    path.write_text(localconfig_text, encoding="utf-8")
    path.chmod(0o600)

    config = read_localconfig(path)
    config.set_launch_options(100, "X")
    write_localconfig(path, config)

    assert path.stat().st_mode & 0o777 == 0o600
