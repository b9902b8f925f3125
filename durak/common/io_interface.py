"""
This module contains the IOInterface abstract base class and its implementations.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

MAX_ATTEMPTS = 3


class IOInterface(ABC):
    """
    Abstract base class for an IO interface.

    This class defines the interface for the text input/output used by
    console front-ends.
    """

    @abstractmethod
    def output(self, message: str) -> None:
        """Output a message to the interface."""
        pass

    @abstractmethod
    def input(self, prompt: str) -> str:
        """Get input from the user with a prompt."""
        pass

    def check_numeric_response(self, ctx: str) -> int:
        """
        Prompt until the response is an integer.

        :raises ValueError: After three non-numeric responses.
        """
        attempts = 0
        while attempts < MAX_ATTEMPTS:
            response = self.input(ctx)
            try:
                return int(response.strip())
            except ValueError:
                self.output("Invalid response, please enter a number.")
                attempts += 1
        raise ValueError("Too many invalid responses. Operation aborted.")


class TestIOInterface(IOInterface):
    """
    A test IO interface. Collects output messages and replays queued input.

    Methods
    -------
    def output(self, message):
        Collect an output message.

    def input(self, prompt):
        Return the next queued response.

    def add_input(self, *responses):
        Queue responses for later prompts.
    """

    __test__ = False

    def __init__(self, responses: list[str] | None = None):
        self.sent_messages: list[str] = []
        self.prompts: list[str] = []
        self.input_responses: list[str] = list(responses or [])

    def output(self, message: str) -> None:
        self.sent_messages.append(message)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.input_responses:
            return self.input_responses.pop(0)
        return "test_input"

    def add_input(self, *responses: str) -> None:
        self.input_responses.extend(responses)


class ConsoleIOInterface(IOInterface):
    """
    A console IO interface for interactive gameplay.
    """

    def output(self, message: str) -> None:
        print(message)

    def input(self, prompt: str) -> str:
        return input(prompt)


class AsyncIOInterfaceWrapper:
    """
    A wrapper class to facilitate asynchronous execution of synchronous IO operations
    defined in an IOInterface implementation. This class uses a ThreadPoolExecutor to
    run synchronous methods in separate threads, allowing them to be awaited without
    blocking the event loop that drives the game.
    """

    def __init__(self, io_interface: IOInterface):
        self.io_interface = io_interface
        self.executor = ThreadPoolExecutor(max_workers=1)

    async def output(self, message: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self.executor, self.io_interface.output, message)

    async def input(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            self.executor, self.io_interface.input, prompt
        )
        return result

    async def check_numeric_response(self, ctx: str) -> int:
        loop = asyncio.get_running_loop()
        numeric_response = await loop.run_in_executor(
            self.executor, self.io_interface.check_numeric_response, ctx
        )
        return numeric_response
