"""Expand testscenarios-based test classes into one class per scenario.

pytest rebinds test methods on the original TestCase instance, which breaks
testscenarios' run-time cloning; generating a subclass per scenario at
collection time lets pytest run each scenario directly.
"""

import inspect

import testscenarios
from _pytest.unittest import UnitTestCase


class ScenarioTestCase(UnitTestCase):
    """Collector for a generated per-scenario class."""

    def __init__(self, *args, scenario_class=None, **kwargs):
        self._scenario_class = scenario_class
        super().__init__(*args, **kwargs)

    def _getobj(self):
        return self._scenario_class


def pytest_pycollect_makeitem(collector, name, obj):
    if not (inspect.isclass(obj) and
            issubclass(obj, testscenarios.WithScenarios)):
        return None
    scenarios = getattr(obj, 'scenarios', None)
    if not scenarios:
        return None
    items = []
    for scenario_name, params in scenarios:
        attrs = dict(params)
        attrs['scenarios'] = None
        attrs['__module__'] = obj.__module__
        sub = type(obj.__name__, (obj,), attrs)
        items.append(ScenarioTestCase.from_parent(
            collector, name='{0}[{1}]'.format(name, scenario_name),
            scenario_class=sub))
    return items
