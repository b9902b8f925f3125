import pytest

from durak.common.io_interface import (
    AsyncIOInterfaceWrapper,
    ConsoleIOInterface,
    TestIOInterface,
)


def test_test_io_interface_methods():
    interface = TestIOInterface()
    interface.output("Test message")
    assert interface.sent_messages == ["Test message"]

    interface.add_input("first", "second")
    assert interface.input("prompt 1") == "first"
    assert interface.input("prompt 2") == "second"
    assert interface.input("prompt 3") == "test_input"
    assert interface.prompts == ["prompt 1", "prompt 2", "prompt 3"]


def test_check_numeric_response_retries():
    interface = TestIOInterface(["abc", " 4 "])
    assert interface.check_numeric_response("Number: ") == 4
    assert interface.sent_messages == ["Invalid response, please enter a number."]


def test_check_numeric_response_gives_up():
    interface = TestIOInterface(["a", "b", "c", "1"])
    with pytest.raises(ValueError):
        interface.check_numeric_response("Number: ")
    assert interface.input_responses == ["1"]


def test_console_io_interface_methods(mocker):
    interface = ConsoleIOInterface()
    mocker.patch("builtins.input", side_effect=["test_input", "5"])
    mock_print = mocker.patch("builtins.print")

    interface.output("Test message")
    mock_print.assert_called_once_with("Test message")
    assert interface.input("Enter something: ") == "test_input"
    assert interface.check_numeric_response("Enter a number: ") == 5


@pytest.mark.asyncio
async def test_async_wrapper():
    interface = TestIOInterface(["hello", "x", "7"])
    wrapper = AsyncIOInterfaceWrapper(interface)

    await wrapper.output("message")
    assert await wrapper.input("prompt") == "hello"
    assert await wrapper.check_numeric_response("number") == 7
    assert interface.sent_messages == [
        "message",
        "Invalid response, please enter a number.",
    ]
