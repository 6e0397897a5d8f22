import pytest

from config import SearchConfig
from constants import NamedConstant
from dimreal import DimensionedValue


@pytest.fixture
def config_factory():
    """Build a SearchConfig that never touches the disk unless asked to."""
    def _make(**overrides):
        overrides.setdefault("save_dir", None)
        return SearchConfig(**overrides)
    return _make


@pytest.fixture
def ctx(config_factory):
    """mpmath context at the default working precision."""
    return config_factory().make_context()


@pytest.fixture
def dv(ctx):
    """Parse shorthand: dv("9.8 m/s^2")."""
    def _parse(text):
        return DimensionedValue.parse(text, ctx)
    return _parse


@pytest.fixture
def pi_constant(ctx):
    return NamedConstant("pi", DimensionedValue(+ctx.pi), is_builtin=True)


@pytest.fixture
def e_constant(ctx):
    return NamedConstant("e", DimensionedValue(+ctx.e), is_builtin=True)
