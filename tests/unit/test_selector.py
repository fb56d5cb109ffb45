"""Unit tests for the InstanceSelector app."""

from unittest.mock import MagicMock, Mock, patch

from tins.tui.selector import SELECTOR_PROMPT, InstanceSelector, select_instance


class TestInstanceSelector:
    """Tests for InstanceSelector."""

    def test_init_keeps_options(self) -> None:
        """Test that the rows and default prompt are stored."""
        selector = InstanceSelector(("tins-a | ACTIVE | 10.0.0.5", "tins-b | BUILD | N/A"))

        assert selector.options == ["tins-a | ACTIVE | 10.0.0.5", "tins-b | BUILD | N/A"]
        assert selector.prompt == SELECTOR_PROMPT

    def test_bindings_defined(self) -> None:
        """Test that escape and ctrl+c cancel the picker."""
        binding_keys = {binding.key: binding.action for binding in InstanceSelector.BINDINGS}

        assert binding_keys == {"escape": "cancel", "ctrl+c": "cancel"}

    def test_option_selected_exits_with_index(self) -> None:
        """Test that confirming a row returns its index."""
        selector = InstanceSelector(["a", "b", "c"])
        selector.exit = Mock()
        event = MagicMock(option_index=2)

        selector.on_option_list_option_selected(event)

        selector.exit.assert_called_once_with(2)

    def test_action_cancel_exits_without_result(self) -> None:
        """Test that cancelling returns None."""
        selector = InstanceSelector(["a"])
        selector.exit = Mock()

        selector.action_cancel()

        selector.exit.assert_called_once_with(None)


class TestSelectInstance:
    """Tests for select_instance."""

    def test_empty_options_skip_the_app(self) -> None:
        """Test that nothing is shown when there is nothing to pick."""
        with patch("tins.tui.selector.InstanceSelector") as mock_app:
            assert select_instance([]) is None

        mock_app.assert_not_called()

    def test_runs_app_and_returns_result(self) -> None:
        """Test that the app result is passed through."""
        with patch("tins.tui.selector.InstanceSelector") as mock_app:
            mock_app.return_value.run.return_value = 1

            assert select_instance(["a", "b"]) == 1

        mock_app.assert_called_once_with(["a", "b"])
