"""
Tests for CLI entry point (reminders_bridge/main.py).

Validates argument parsing, command dispatch, and error handling.
"""

from unittest.mock import Mock, patch

import pytest

from reminders_bridge.core.config import BridgeConfig
from reminders_bridge.core.exceptions import ConfigurationError
from reminders_bridge.main import main


def _mock_command(success=True):
    instance = Mock()
    instance.run.return_value = success
    return instance


class TestMainCLI:
    """Test suite for main CLI entry point."""

    def test_status_command_dispatch(self):
        with patch('reminders_bridge.main.StatusCommand') as mock_status:
            mock_status.return_value = _mock_command()

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                result = main(['status', '--request'])

            mock_status.return_value.run.assert_called_once_with(request=True)
            assert result == 0

    def test_lists_rename_dispatch(self):
        with patch('reminders_bridge.main.ListsCommand') as mock_lists:
            mock_lists.return_value = _mock_command()

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                result = main(['lists', '--rename', 'L1', 'Shopping'])

            mock_lists.return_value.run.assert_called_once_with(
                create=None, rename=['L1', 'Shopping'], delete=None
            )
            assert result == 0

    def test_reminders_add_dispatch(self):
        with patch('reminders_bridge.main.RemindersCommand') as mock_reminders:
            mock_reminders.return_value = _mock_command()

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                result = main([
                    'reminders', '--list', 'L1', '--add', 'Milk',
                    '--due', '2024-05-01', '--priority', '5', '--notes', 'n',
                ])

            mock_reminders.return_value.run.assert_called_once_with(
                list_id='L1', add='Milk', due='2024-05-01', priority=5,
                notes='n', complete=None, delete=None,
            )
            assert result == 0

    def test_serve_dispatch_adds_file_logging(self):
        with patch('reminders_bridge.main.ServeCommand') as mock_serve, \
                patch('reminders_bridge.main._configure_logging') as mock_logging:
            mock_serve.return_value = _mock_command()

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                result = main(['serve'])

            mock_logging.assert_called_once()
            assert mock_logging.call_args.kwargs['to_file'] is True
            assert result == 0

    def test_backend_override(self):
        config = BridgeConfig()
        with patch('reminders_bridge.main.StatusCommand') as mock_status:
            mock_status.return_value = _mock_command()

            with patch('reminders_bridge.main.load_config', return_value=config):
                main(['--backend', 'memory', 'status'])

        assert config.backend == 'memory'

    def test_failed_command_exit_code(self):
        with patch('reminders_bridge.main.StatusCommand') as mock_status:
            mock_status.return_value = _mock_command(success=False)

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                assert main(['status']) == 1

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert 'usage' in capsys.readouterr().out.lower()

    def test_invalid_priority_rejected(self):
        with pytest.raises(SystemExit):
            main(['reminders', '--add', 'Milk', '--priority', '12'])

    def test_invalid_config(self, capsys):
        with patch('reminders_bridge.main.load_config', side_effect=ConfigurationError("bad backend")):
            assert main(['status']) == 1

        assert 'bad backend' in capsys.readouterr().err

    def test_keyboard_interrupt(self):
        with patch('reminders_bridge.main.StatusCommand') as mock_status:
            mock_status.return_value.run.side_effect = KeyboardInterrupt

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                assert main(['status']) == 130

    def test_unexpected_error(self, capsys):
        with patch('reminders_bridge.main.ListsCommand') as mock_lists:
            mock_lists.return_value.run.side_effect = RuntimeError("kaboom")

            with patch('reminders_bridge.main.load_config', return_value=BridgeConfig()):
                assert main(['lists']) == 1

        err = capsys.readouterr().err
        assert 'kaboom' in err
        assert '--verbose' in err

    def test_end_to_end_with_memory_backend(self, temp_dir, capsys):
        config = BridgeConfig(backend='memory', memory_authorization='fullAccess',
                              state_path=f"{temp_dir}/state.json")

        with patch('reminders_bridge.main.load_config', return_value=config):
            assert main(['lists', '--create', 'Groceries']) == 0
            assert main(['lists']) == 0

        assert 'Groceries' in capsys.readouterr().out
