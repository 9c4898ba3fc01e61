from PIL import Image

from bubble_art import cli


def test_cli_run(tmp_path, monkeypatch):
    printed = []
    monkeypatch.setattr(cli, "print_formatted_text", lambda *a, **k: printed.append(a[0]))
    src = tmp_path / "in.png"
    Image.new("RGB", (30, 20), (200, 40, 40)).save(src)
    out = tmp_path / "out"

    code = cli.run([
        str(src), "-o", str(out), "--block-size", "5", "--max-width", "30",
        "--quality", "medium", "--config", str(tmp_path / "c.json"),
        "--preview-png", str(tmp_path / "preview.png"),
    ])

    assert code == 0
    saved = list(out.glob("bubble-pixel-art-*.png"))
    assert len(saved) == 1
    assert Image.open(saved[0]).size == (30, 20)
    assert Image.open(tmp_path / "preview.png").size == (30, 20)
    assert len(printed) == 2


def test_cli_reports_load_errors(tmp_path, monkeypatch):
    printed = []
    monkeypatch.setattr(cli, "print_formatted_text", lambda *a, **k: printed.append(a[0]))
    code = cli.run([str(tmp_path / "missing.png"), "--config", str(tmp_path / "c.json")])
    assert code == 1
    assert "Error" in printed[0][0][1]
