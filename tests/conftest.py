"""
Shared fixtures for the exporter tests: raw pool records shaped like the
kernel's pool stats nvlist, and helpers to read metric families back.
"""

import pytest
from prometheus_client.parser import text_string_to_metric_families

from zpool_exporter.registry import build_registry
from zpool_exporter.stats_schema import VDEV_STATS, stat_slot_count
from zpool_exporter.writer.prometheus_writer import MetricFamilyWriter

VDEV_STAT_SLOTS = stat_slot_count(VDEV_STATS)


def vdev_stats(length=VDEV_STAT_SLOTS, start=100):
    return list(range(start, start + length))


def disk(vdev_id, path, **extra):
    node = {
        'type': 'disk',
        'id': vdev_id,
        'path': path,
        'vdev_stats': vdev_stats(),
        'vdev_stats_ex': {},
    }
    node.update(extra)
    return node


def mirror(vdev_id, children, **extra):
    node = {
        'type': 'mirror',
        'id': vdev_id,
        'children': children,
        'vdev_stats': vdev_stats(),
        'vdev_stats_ex': {},
    }
    node.update(extra)
    return node


def pool_record(children, name='tank', **extra):
    record = {
        'name': name,
        'pool_guid': 1234567890123456789,
        'error_count': 0,
        'vdev_children': len(children),
        'txg': 4242,
        'initial_load_time': [1700000000, 123456],
        'vdev_tree': {
            'type': 'root',
            'id': 0,
            'children': children,
            'vdev_stats': vdev_stats(),
            'vdev_stats_ex': {},
        },
    }
    record.update(extra)
    return record


def family_by_name(families, name):
    for family in families:
        if family.name == name:
            return family
    return None


def samples(families, name, sample_name=None):
    """Samples of the family called name, optionally only those called sample_name."""
    family = family_by_name(families, name)
    if family is None:
        return []
    return [s for s in family.samples if sample_name is None or s.name == sample_name]


def parse_exposition(text):
    """Parse text exposition output into families keyed by name."""
    return {family.name: family for family in text_string_to_metric_families(text)}


def exposition_samples(families, name, sample_name=None):
    """(labels, value) pairs of a parsed family, optionally only those called sample_name."""
    family = families.get(name)
    if family is None:
        return []
    return [(s.labels, s.value) for s in family.samples if sample_name is None or s.name == sample_name]


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def writer():
    return MetricFamilyWriter()


@pytest.fixture
def mirror_pool():
    """A pool with one two-way mirror."""
    return pool_record([
        mirror(0, [
            disk(0, '/dev/disk/by-id/ata-DISK_A-part1'),
            disk(1, '/dev/disk/by-id/ata-DISK_B-part1'),
        ]),
    ])
