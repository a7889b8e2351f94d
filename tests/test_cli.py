import json

from settingeval.cli import main

SETTINGS = json.dumps(
    [
        {"setting": "beta", "value": False, "except": [{"value": True, "farm": ["111", "222"]}]},
        {"setting": "checkout", "value": "v1", "except": [{"value": "v2", "setting": "beta"}]},
    ]
)


def test_help(capsys):
    assert main([]) == 0
    assert "evaluate" in capsys.readouterr().out


def test_unknown_command(capsys):
    assert main(["frobnicate"]) == 2
    assert "Unknown command" in capsys.readouterr().err


def test_evaluate_prints_value(capsys):
    code = main(["evaluate", "--settings", SETTINGS, "--setting", "checkout", "--context", '{"farm": "111"}'])
    assert code == 0
    assert json.loads(capsys.readouterr().out) == "v2"


def test_evaluate_with_override(capsys):
    code = main(
        [
            "evaluate",
            "--settings",
            SETTINGS,
            "--setting",
            "checkout",
            "--context",
            '{"farm": "111"}',
            "--override",
            "beta=false",
        ]
    )
    assert code == 0
    assert json.loads(capsys.readouterr().out) == "v1"


def test_evaluate_explain(capsys):
    code = main(["evaluate", "--settings", SETTINGS, "--setting", "beta", "--context", '{"farm": "3"}', "--explain"])
    assert code == 0
    explanation = json.loads(capsys.readouterr().out)
    assert explanation["source"] == "default"
    assert explanation["rules"][0]["matched"] is False


def test_evaluate_unknown_setting(capsys):
    assert main(["evaluate", "--settings", SETTINGS, "--setting", "nope"]) == 2
    assert "Unknown setting" in capsys.readouterr().err


def test_evaluate_reports_errors(capsys):
    settings = json.dumps([{"setting": "p", "value": False, "except": [{"value": True, "percentage": 10}]}])
    assert main(["evaluate", "--settings", settings, "--setting", "p"]) == 1
    assert "percentageSeed" in capsys.readouterr().err


def test_resolve_from_file(tmp_path, capsys):
    path = tmp_path / "settings.json"
    path.write_text(SETTINGS)
    assert main(["resolve", "--settings", str(path), "--context", '{"farm": "222"}', "--override", "x=on"]) == 0
    assert json.loads(capsys.readouterr().out) == {"beta": True, "checkout": "v2"}
