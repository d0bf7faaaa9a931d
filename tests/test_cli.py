import json

import pytest

from funcfind.cli import main


def test_json_report(capsys):
    code = main(
        ["--law", "quadratic", "--seed", "3", "--generations", "5", "--population", "10", "--json"]
    )
    assert code == 0

    report = json.loads(capsys.readouterr().out)
    assert report["law"] == "quadratic"
    assert report["generations"] == 5
    assert report["evaluations"] == 50
    assert report["record"]["formula"] == report["formula"]
    assert report["record"]["name"].startswith("evolve_3_")


def test_human_report(capsys):
    main(["--law", "wave", "--generations", "2", "--population", "6", "--grid", "-2", "2", "0.5"])
    out = capsys.readouterr().out
    assert "FuncFind Results" in out
    assert "Evaluations: 12/12" in out


def test_budget_flag_limits_evaluations(capsys):
    main(["--generations", "100", "--population", "8", "--budget", "20", "--json"])
    report = json.loads(capsys.readouterr().out)
    assert report["evaluations"] == 20
    assert report["budget"] == 20


def test_invalid_configuration_exits():
    with pytest.raises(SystemExit):
        main(["--population", "0"])
    with pytest.raises(SystemExit):
        main(["--grid", "1", "0", "0.1"])
