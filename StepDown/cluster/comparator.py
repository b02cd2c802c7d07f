from typing import Dict, Iterable, Set

from StepDown.callgraph.signature import Signature
from StepDown.cluster.cluster_node import ClusterNode
from StepDown.comparator.base import Comparator, SignatureComparator


class SignatureCluster(Comparator):
    """Ranks the members of one cluster by their position in it."""

    def __init__(self, cluster: ClusterNode):
        self.main_signature = cluster.signature
        self.comparator = SignatureComparator()
        for i, node in enumerate(cluster.clustered_nodes):
            self.comparator.put(node.signature, i)

    def compare(self, signature1: Signature, signature2: Signature) -> int:
        return self.comparator.compare(signature1, signature2)


class ClusterComparator(Comparator):
    """
    Keeps clusters contiguous.

    Members of the same cluster follow the cluster's own order; members of
    different clusters are ordered by comparing the clusters' main
    signatures with the outer comparator.
    """

    def __init__(self, signature_comparator: Comparator, clusters: Iterable[ClusterNode]):
        self.signature_comparator = signature_comparator
        self.mapping: Dict[Signature, SignatureCluster] = {}
        self.known_signatures: Set[Signature] = set()
        for cluster in clusters:
            signature_cluster = SignatureCluster(cluster)
            for node in cluster.clustered_nodes:
                self.mapping[node.signature] = signature_cluster
                self.known_signatures.add(node.signature)

    def compare(self, signature1: Signature, signature2: Signature) -> int:
        if signature1 not in self.known_signatures or signature2 not in self.known_signatures:
            return 0
        cluster1 = self.mapping[signature1]
        cluster2 = self.mapping[signature2]
        if cluster1 is cluster2:
            return cluster1.compare(signature1, signature2)
        return self.signature_comparator.compare(cluster1.main_signature, cluster2.main_signature)
