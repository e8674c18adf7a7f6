import pytest

from ltianalyzer import FirstOrderPlant, HigherOrderPlant, SecondOrderPlant


@pytest.fixture
def first_order():
    return FirstOrderPlant(K=1.0, tau=1.0)


@pytest.fixture
def underdamped():
    return SecondOrderPlant(K=1.0, wn=2.0, zeta=0.5)


@pytest.fixture
def overdamped():
    return SecondOrderPlant(K=1.0, wn=2.0, zeta=1.5)


@pytest.fixture
def triple_lag():
    # 1 / (s + 1)^3
    return HigherOrderPlant(K=1.0, num=[1.0], den=[1.0, 3.0, 3.0, 1.0])


@pytest.fixture
def double_integrator():
    # 1 / (s^2 (s + 1))
    return HigherOrderPlant(K=1.0, num=[1.0], den=[1.0, 1.0, 0.0, 0.0])
