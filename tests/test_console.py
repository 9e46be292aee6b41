"""Tests for console.py module."""

from unittest.mock import patch

from ksecret import console


class TestConsoleOutput:
    """Tests for console output functions."""

    def test_success_message(self):
        """Test success message format."""
        with patch.object(console.console, "print") as mock_print:
            console.success("my-secret updated.")
            mock_print.assert_called_once()
            call_arg = mock_print.call_args[0][0]
            assert "✓" in call_arg
            assert "my-secret updated." in call_arg

    def test_warning_goes_to_stderr(self):
        """Test that warnings are printed on the error console."""
        with (
            patch.object(console.console, "print") as mock_print,
            patch.object(console.err_console, "print") as mock_err_print,
        ):
            console.warning("Be careful")
            mock_print.assert_not_called()
            call_arg = mock_err_print.call_args[0][0]
            assert "⚠" in call_arg
            assert "Be careful" in call_arg

    def test_error_goes_to_stderr(self):
        """Test that errors are printed on the error console."""
        with (
            patch.object(console.console, "print") as mock_print,
            patch.object(console.err_console, "print") as mock_err_print,
        ):
            console.error("Something failed")
            mock_print.assert_not_called()
            call_arg = mock_err_print.call_args[0][0]
            assert "✗" in call_arg
            assert "Something failed" in call_arg

    def test_action_message(self):
        """Test action message format."""
        with patch.object(console.console, "print") as mock_print:
            console.action("Working with dev cluster")
            mock_print.assert_called_once()
            call_arg = mock_print.call_args[0][0]
            assert "→" in call_arg
            assert "Working with dev cluster" in call_arg

    def test_highlight_returns_markup(self):
        """Test highlight returns Rich markup."""
        result = console.highlight("important")
        assert result == "[highlight]important[/highlight]"

    def test_error_console_writes_stderr(self):
        """Test that the error console is bound to standard error."""
        assert console.err_console.stderr
        assert not console.console.stderr


class TestConsoleSpinner:
    """Tests for spinner context manager."""

    def test_spinner_context_manager(self):
        """Test spinner works as context manager."""
        with patch.object(console.console, "status") as mock_status:
            mock_status.return_value.__enter__ = lambda x: None
            mock_status.return_value.__exit__ = lambda x, *args: None
            with console.spinner("Fetching my-secret..."):
                pass
            mock_status.assert_called_once()
            assert "Fetching my-secret..." in mock_status.call_args[0][0]
