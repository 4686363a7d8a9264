"""Pytest configuration and fixtures."""

import pytest

from designproof.config import Settings
from designproof.parsers.python_parser import PythonParser
from designproof.semantics.builder import SemanticModelBuilder

# Sample Python code for testing
SAMPLE_SIMPLE_CLASS = '''
class Calculator:
    """A simple calculator class."""

    def __init__(self, initial_value: int = 0):
        """Initialize with a starting value."""
        self.value = initial_value

    def add(self, x: int) -> int:
        """Add x to the current value."""
        self.value += x
        return self.value

    def subtract(self, x: int) -> int:
        """Subtract x from the current value."""
        self.value -= x
        return self.value
'''

SAMPLE_BRANCHING = '''
class ShippingCalculator:
    def cost(self, order):
        if order.kind == "express":
            return 20
        elif order.kind == "overnight":
            return 40
        else:
            return 5

    def label(self, order):
        return "heavy" if order.weight > 10 else "light"
'''

SAMPLE_INHERITANCE = '''
from abc import ABC, abstractmethod


class Shape(ABC):
    @abstractmethod
    def area(self):
        pass


class Rectangle(Shape):
    def __init__(self, width, height):
        self.width = width
        self.height = height

    def area(self):
        return self.width * self.height

    def resize(self, width, height):
        self.width = width
        self.height = height


class Square(Rectangle):
    def __init__(self, side):
        super().__init__(side, side)

    def resize(self, side):
        self.width = side
        self.height = side
'''

SAMPLE_REFUSED_BEQUEST = '''
class Bird:
    def fly(self, altitude):
        return altitude * 2


class Penguin(Bird):
    def fly(self, altitude):
        raise NotImplementedError("Penguins cannot fly")
'''

SAMPLE_DUPLICATES = '''
class Invoice:
    def total_price(self, items):
        total = 0
        for item in items:
            total += item.price * 2
        return total


class Shipment:
    def total_weight(self, parcels):
        """Sum parcel weights."""
        acc = 1
        # weights are in kilograms
        for parcel in parcels:
            acc += parcel.weight * 3
        return acc


class Refund:
    def total_refund(self, lines):
        total = 0
        for line in lines:
            total -= line.amount * 2
        return total
'''

SAMPLE_CHAINS = '''
class ReportBuilder:
    def city(self, order):
        return order.customer.address.city.name

    def short_city(self, order):
        return order.customer.address.city

    def owner(self):
        return self.repository.find().owner
'''

SAMPLE_UTILITY_CLASS = '''
class StringUtils:
    @staticmethod
    def slugify(text):
        return text.lower()

    @staticmethod
    def title(text):
        return text.title()

    @classmethod
    def build(cls, value):
        return cls()

    @staticmethod
    def strip(text):
        return text.strip()
'''

SAMPLE_WITH_SYNTAX_ERROR = '''
class Good:
    def ok(self):
        return 1


def broken(:
    pass
'''


def class_with_methods(name: str, count: int) -> str:
    """Source for a class with ``count`` trivial public methods."""
    lines = [f"class {name}:"]
    for i in range(count):
        lines.append(f"    def method_{i}(self):")
        lines.append(f"        return {i}")
        lines.append("")
    return "\n".join(lines)


@pytest.fixture
def sample_simple_class():
    return SAMPLE_SIMPLE_CLASS


@pytest.fixture
def sample_branching():
    return SAMPLE_BRANCHING


@pytest.fixture
def sample_inheritance():
    return SAMPLE_INHERITANCE


@pytest.fixture
def sample_refused_bequest():
    return SAMPLE_REFUSED_BEQUEST


@pytest.fixture
def sample_duplicates():
    return SAMPLE_DUPLICATES


@pytest.fixture
def sample_chains():
    return SAMPLE_CHAINS


@pytest.fixture
def sample_utility_class():
    return SAMPLE_UTILITY_CLASS


@pytest.fixture
def sample_with_syntax_error():
    return SAMPLE_WITH_SYNTAX_ERROR


@pytest.fixture
def make_class():
    """Factory for classes with a given number of trivial methods."""
    return class_with_methods


@pytest.fixture
def parser():
    """Create a PythonParser instance."""
    return PythonParser()


@pytest.fixture
def build_model(parser):
    """Parse and build a semantic model from source text."""

    def _build(source: str, unit_name: str = "sample"):
        return SemanticModelBuilder().build(parser.parse(source), unit_name=unit_name)

    return _build


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, writing under tmp_path."""
    return Settings(
        _env_file=None,
        candidates_dir=str(tmp_path / "candidates"),
        temp_dir=str(tmp_path / "downloads"),
    )
