"""Node capacity checks and usage reporting"""

from models.node import Node


def _node(memory=1000, disk=1000, memory_overallocate=0, disk_overallocate=0, sum_memory=0, sum_disk=0):
    return {
        'memory': memory,
        'disk': disk,
        'memory_overallocate': memory_overallocate,
        'disk_overallocate': disk_overallocate,
        'sum_memory': sum_memory,
        'sum_disk': sum_disk,
    }


def test_viable_within_limits():
    assert Node.is_viable(_node(sum_memory=500, sum_disk=500), 500, 500)


def test_memory_over_limit_is_not_viable():
    assert not Node.is_viable(_node(sum_memory=600), 401, 10)


def test_disk_over_limit_is_not_viable():
    assert not Node.is_viable(_node(sum_disk=999), 10, 2)


def test_overallocate_extends_limit():
    node = _node(memory_overallocate=50, sum_memory=1200)
    assert Node.is_viable(node, 300, 0)
    assert not Node.is_viable(node, 301, 0)


def test_negative_one_overallocate_disables_limit():
    node = _node(memory_overallocate=-1, disk_overallocate=-1, sum_memory=10 ** 6, sum_disk=10 ** 6)
    assert Node.is_viable(node, 10 ** 6, 10 ** 6)


def test_connection_address():
    node = {'scheme': 'https', 'fqdn': 'node1.example.com', 'daemon_listen': 8443}
    assert Node.get_connection_address(node) == 'https://node1.example.com:8443'


def test_resource_usage_sums_servers_on_node(panel, coordinator):
    owner = panel.user()
    node, allocations = panel.node(memory=8192)
    panel.server(owner, node, allocations[0], memory=1024, disk=2048)
    panel.server(owner, node, allocations[1], memory=512, disk=1024)

    usage = coordinator.node_model.get_with_resource_usage(node['id'])
    assert usage['sum_memory'] == 1536
    assert usage['sum_disk'] == 3072
    assert usage['server_count'] == 2


def test_resource_usage_of_empty_node(panel, coordinator):
    node, _ = panel.node()
    usage = coordinator.node_model.get_with_resource_usage(node['id'])
    assert usage['sum_memory'] == 0
    assert usage['server_count'] == 0


def test_node_usage_report(panel, coordinator):
    owner = panel.user()
    node, allocations = panel.node(memory=1000, memory_overallocate=20, disk_overallocate=-1)
    panel.server(owner, node, allocations[0], memory=300, disk=100)

    usage = coordinator.transfer_service.get_node_usage(node['id'])
    assert usage['memory'] == {'used': 300, 'total': 1000, 'limit': 1200}
    assert usage['disk']['limit'] is None
    assert usage['free_allocations'] == 2


def test_node_usage_unknown_node(coordinator):
    assert coordinator.transfer_service.get_node_usage(404) is None
