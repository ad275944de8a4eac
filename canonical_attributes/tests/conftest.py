import pytest


class DictRecord:
    """Dict-backed record; only the keys passed in are loaded fields."""

    def __init__(self, new=True, **values):
        self.values = dict(values)
        self.new = new
        self.updates = []

    def has_field(self, name):
        return name in self.values

    def has_value(self, name):
        return self.values.get(name) is not None

    def get(self, name):
        return self.values[name]

    def set(self, name, value):
        self.values[name] = value

    def is_new_record(self):
        return self.new

    def persisted_update(self, name, value):
        self.values[name] = value
        self.updates.append((name, value))
        return True


@pytest.fixture
def make_row():
    return DictRecord
