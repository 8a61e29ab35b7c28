"""Tests for the command-line interface."""

from otp_auth.cli import main
from otp_auth.keycodec import decode_key


SECRET_TEXT = "64P36D1L6ORJGE9G64P36D1L6ORJGE9G"  # "12345678901234567890"


def test_code_hotp(capsys):
    """Test printing an HOTP code."""
    assert main(["code", "--secret", SECRET_TEXT, "--type", "hotp", "--counter", "1"]) == 0
    assert capsys.readouterr().out == "287082\n"


def test_code_totp_explicit_time(capsys):
    """Test printing a TOTP code for a fixed time."""
    assert main(["gen", "-s", SECRET_TEXT, "--time", "59", "--digits", "8"]) == 0
    assert capsys.readouterr().out == "94287082\n"


def test_code_totp_now(capsys):
    """Test printing a TOTP code for the current time."""
    assert main(["code", "-s", SECRET_TEXT]) == 0
    out = capsys.readouterr().out.strip()
    assert len(out) == 6
    assert out.isdigit()


def test_code_hotp_requires_counter(capsys):
    """Test that HOTP without a counter is an error."""
    assert main(["code", "-s", SECRET_TEXT, "-t", "hotp"]) == 1
    assert "--counter is required" in capsys.readouterr().err


def test_code_invalid_secret(capsys):
    """Test that a malformed secret is reported."""
    assert main(["code", "-s", "not-a-secret", "--time", "0"]) == 1
    assert "✗" in capsys.readouterr().err


def test_verify_accepted(capsys):
    """Test verifying a valid code."""
    assert main(["verify", "755224", "-s", SECRET_TEXT, "-t", "hotp", "-c", "0"]) == 0
    assert "accepted" in capsys.readouterr().err


def test_verify_rejected(capsys):
    """Test verifying an invalid code."""
    assert main(["verify", "755224", "-s", SECRET_TEXT, "-t", "hotp", "-c", "1"]) == 1
    assert "rejected" in capsys.readouterr().err


def test_verify_totp_window(capsys):
    """Test TOTP verification with a skew window."""
    assert main(["verify", "287082", "-s", SECRET_TEXT, "--time", "60"]) == 1
    assert main(["verify", "287082", "-s", SECRET_TEXT, "--time", "60", "--window", "1"]) == 0


def test_uri(capsys):
    """Test printing a provisioning URI."""
    assert main(["uri", "-s", SECRET_TEXT, "--label", "alice@example.com", "--issuer", "ExampleCo"]) == 0
    assert capsys.readouterr().out == (
        "otpauth://totp/ExampleCo:alice%40example.com"
        f"?issuer=ExampleCo&secret={SECRET_TEXT}\n"
    )


def test_uri_hotp_counter(capsys):
    """Test that the HOTP URI carries the initial counter."""
    assert main(["uri", "-s", SECRET_TEXT, "-t", "hotp", "-l", "alice", "-c", "4"]) == 0
    assert "counter=4" in capsys.readouterr().out


def test_secret(capsys):
    """Test generating a random secret."""
    assert main(["secret"]) == 0
    assert len(decode_key(capsys.readouterr().out.strip())) == 20

    assert main(["secret", "--length", "32"]) == 0
    assert len(decode_key(capsys.readouterr().out.strip())) == 32


def test_secret_too_short(capsys):
    """Test that short secrets are refused."""
    assert main(["secret", "--length", "4"]) == 1
    assert "at least 16 bytes" in capsys.readouterr().err


def test_no_command(capsys):
    """Test that running without a command prints help."""
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_code_totp_rejects_counter(capsys):
    """Test that --counter is an error for TOTP."""
    assert main(["code", "-s", SECRET_TEXT, "--counter", "1"]) == 1
    assert "--counter is not supported for TOTP" in capsys.readouterr().err


def test_code_hotp_rejects_time(capsys):
    """Test that --time is an error for HOTP."""
    assert main(["code", "-s", SECRET_TEXT, "-t", "hotp", "-c", "1", "--time", "59"]) == 1
    assert "--time is not supported for HOTP" in capsys.readouterr().err


def test_verify_totp_rejects_counter(capsys):
    """Test that verify reports a mismatched option instead of ignoring it."""
    assert main(["verify", "287082", "-s", SECRET_TEXT, "-c", "1"]) == 1
    assert "--counter is not supported for TOTP" in capsys.readouterr().err
