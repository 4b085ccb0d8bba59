import json

from swhkd_parser.cli import hkcheck, hkdump


def test_hkcheck_clean(write_config, capsys):
    path = write_config("rc", "super + a -> echo hi\n")
    assert hkcheck.main(["--config", path]) == 0
    assert capsys.readouterr().err == ""


def test_hkcheck_reports_diagnostics(write_config, capsys):
    path = write_config("rc", "super + nosuchkey -> echo hi\n")
    assert hkcheck.main(["--config", path]) == 0
    err = capsys.readouterr().err
    assert err == f"{path}:1:9: Unknown key 'nosuchkey'\n"
    assert hkcheck.main(["--config", path, "--werror"]) == 1


def test_hkcheck_fatal(write_config, capsys):
    a = write_config("a", "import b\n")
    write_config("b", "import a\n")
    assert hkcheck.main(["-c", a]) == 1
    err = capsys.readouterr().err
    assert "Import cycle" in err
    assert err.rstrip().endswith("[FATAL]")


def test_hkdump_txt(write_config, capsys):
    path = write_config(
        "rc",
        "super + {1,2} -> echo {1,2}\nmode resize:\n    h -> echo h\n",
    )
    assert hkdump.main(["-c", path]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "mode default:",
        "    super + 1 -> echo 1",
        "    super + 2 -> echo 2",
        "mode resize:",
        "    h -> echo h",
    ]


def test_hkdump_json_single_mode(write_config, capsys):
    path = write_config("rc", "super + a -> echo\nmode resize:\n    h -> echo h\n")
    assert hkdump.main(["-c", path, "--format", "json", "--mode", "resize"]) == 0
    data = json.loads(capsys.readouterr().out)
    (mode,) = data["modes"]
    assert mode["name"] == "resize"
    assert mode["bindings"][0]["key"] == "h"


def test_hkdump_unknown_mode(write_config, capsys):
    path = write_config("rc", "super + a -> echo\n")
    assert hkdump.main(["-c", path, "-m", "nope"]) == 1
    assert "no mode named 'nope'" in capsys.readouterr().err


def test_max_size_option(write_config, capsys):
    path = write_config("rc", "super + a -> echo\n")
    assert hkcheck.main(["-c", path, "--max-size", "4"]) == 1
    assert "over the limit" in capsys.readouterr().err
