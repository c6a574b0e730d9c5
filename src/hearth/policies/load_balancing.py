"""
Load balancing that prefers nodes in the local datacenter.
"""
import random
import zlib
from typing import Iterable, List, Optional

from cassandra.policies import HostDistance, LoadBalancingPolicy


class LocalDcFirstPolicy(LoadBalancingPolicy):
    """
    Query plans that try local-datacenter nodes before everyone else.

    Within each group the order is fixed for a given set of nodes: it is
    keyed on the node address and a seed drawn once per policy instance.
    Repeated plans therefore never reshuffle (no routing flapping), while
    different sessions, each owning their own instance, spread their first
    choice across the cluster.

    Without a local datacenter every node is LOCAL and a single group is used.
    """

    def __init__(self, local_dc: Optional[str] = None, seed: Optional[int] = None):
        super().__init__()
        self.local_dc = local_dc
        self._seed = seed if seed is not None else random.getrandbits(32)
        self._live_hosts = frozenset()

    def order(self, nodes: Iterable, local_dc: Optional[str] = None) -> List:
        """
        Order candidate nodes, local datacenter first.

        Args:
            nodes: Candidate nodes (anything with ``address`` and
                ``datacenter`` attributes)
            local_dc: Preferred datacenter, or None for no preference

        Returns:
            Nodes in a stable order
        """
        def sort_key(node):
            remote = local_dc is not None and node.datacenter != local_dc
            address = str(node.address)
            rank = zlib.crc32(f"{self._seed}:{address}".encode("utf-8"))
            return (remote, rank, address)

        return sorted(nodes, key=sort_key)

    def populate(self, cluster, hosts):
        with self._hosts_lock:
            self._live_hosts = frozenset(hosts)

    def distance(self, host):
        if self.local_dc is None or host.datacenter == self.local_dc:
            return HostDistance.LOCAL
        return HostDistance.REMOTE

    def make_query_plan(self, working_keyspace=None, query=None):
        return iter(self.order(self._live_hosts, self.local_dc))

    def on_up(self, host):
        with self._hosts_lock:
            self._live_hosts = self._live_hosts | {host}

    def on_down(self, host):
        with self._hosts_lock:
            self._live_hosts = self._live_hosts - {host}

    def on_add(self, host):
        self.on_up(host)

    def on_remove(self, host):
        self.on_down(host)
