import logging

from zenbatu.core.logging import redact, setup_logging


def test_redact_masks_credentials():
    out = redact("login password=Secr3t! token: abc.def sessionId=1234 user=alice")
    assert "Secr3t!" not in out
    assert "abc.def" not in out
    assert "1234" not in out
    assert "user=alice" in out


def test_file_handler_writes_redacted_lines(tmp_path):
    log_file = tmp_path / "logs" / "zenbatu.log"
    setup_logging("DEBUG", log_file)
    try:
        logging.getLogger("zenbatu.test").info("payload %s", "password=hunter2!")
        logging.getLogger("zenbatu.test").debug("secret=abc123 seen")
        text = log_file.read_text(encoding="utf-8")
    finally:
        setup_logging("WARNING", None)

    assert "hunter2!" not in text
    assert "abc123" not in text
    assert "[REDACTED]" in text
    assert "zenbatu.test" in text


def test_setup_is_idempotent():
    logger = setup_logging("INFO")
    setup_logging("INFO")
    ours = [h for h in logger.handlers if getattr(h, "_zenbatu", False)]
    assert len(ours) == 1
    setup_logging("WARNING")


def test_placeholder_after_a_sensitive_key_is_rendered_then_masked(tmp_path, capsys):
    log_file = tmp_path / "zenbatu.log"
    setup_logging("INFO", log_file)
    try:
        logging.getLogger("zenbatu.test").info("login body password=%s user=%s", "Secr3t!", "alice")
        text = log_file.read_text(encoding="utf-8")
    finally:
        setup_logging("WARNING", None)

    err = capsys.readouterr().err
    assert "Logging error" not in err
    assert "Secr3t!" not in err
    assert "Secr3t!" not in text
    assert "password=[REDACTED] user=alice" in text


def test_mismatched_arguments_do_not_leak(tmp_path, capsys):
    log_file = tmp_path / "zenbatu.log"
    setup_logging("INFO", log_file)
    try:
        logging.getLogger("zenbatu.test").info("token=%s", "abc.def", "extra")
        text = log_file.read_text(encoding="utf-8")
    finally:
        setup_logging("WARNING", None)

    err = capsys.readouterr().err
    assert "abc.def" not in text
    assert "abc.def" not in err
    assert "unformattable arguments dropped" in text
