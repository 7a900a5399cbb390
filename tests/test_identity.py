"""
Tests for vdev label naming.
"""

from zpool_exporter.identity import vdev_name
from zpool_exporter.models import VdevNode


def node(**kwargs):
    return VdevNode.from_dict(kwargs)


class TestLeafInheritance:
    """Disks and files below a group carry the group's name."""

    def test_disk_inherits_parent(self):
        assert vdev_name('mirror-0', node(type='disk', id=1, path='/dev/sda')) == 'mirror-0'

    def test_file_inherits_parent(self):
        assert vdev_name('raidz2-1', node(type='file', id=3, path='/tmp/f')) == 'raidz2-1'

    def test_nested_parent_is_kept_whole(self):
        assert vdev_name('mirror-1/replacing-0', node(type='disk', id=0)) == 'mirror-1/replacing-0'

    def test_top_level_disk_gets_own_name(self):
        assert vdev_name('', node(type='disk', id=2, path='/dev/sdc')) == 'disk-2'

    def test_top_level_file_gets_own_name(self):
        assert vdev_name('', node(type='file', id=0, path='/var/tmp/pool.img')) == 'file-0'


class TestGroupNames:
    """Group vdev names follow 'zpool status'."""

    def test_mirror(self):
        assert vdev_name('', node(type='mirror', id=0, children=[])) == 'mirror-0'

    def test_raidz_fuses_parity_into_type(self):
        assert vdev_name('', node(type='raidz', id=3, nparity=2, children=[])) == 'raidz2-3'

    def test_draid(self):
        children = [{'type': 'disk', 'id': i} for i in range(10)]
        vdev = node(type='draid', id=0, nparity=1, draid_ndata=8, draid_nspares=2, children=children)
        assert vdev_name('', vdev) == 'draid1:8d:10c:2s-0'

    def test_draid_counts_direct_children_only(self):
        children = [
            {'type': 'spare', 'id': 0, 'children': [{'type': 'disk', 'id': 0}, {'type': 'disk', 'id': 1}]},
            {'type': 'disk', 'id': 1},
        ]
        vdev = node(type='draid', id=4, nparity=2, draid_ndata=4, draid_nspares=0, children=children)
        assert vdev_name('', vdev) == 'draid2:4d:2c:0s-4'

    def test_nested_group_is_prefixed_with_parent(self):
        assert vdev_name('mirror-1', node(type='replacing', id=0, children=[])) == 'mirror-1/replacing-0'

    def test_nested_raidz_is_prefixed_with_parent(self):
        assert vdev_name('root-0', node(type='raidz', id=1, nparity=1)) == 'root-0/raidz1-1'

    def test_unrecognised_type_uses_type_and_id(self):
        assert vdev_name('', node(type='indirect', id=5)) == 'indirect-5'

    def test_root(self):
        assert vdev_name('', node(type='root', id=0, children=[])) == 'root-0'
