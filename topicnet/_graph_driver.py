"""
Graph and network analysis functions for topicnet.

This module contains topic graph construction, Infomap community detection, node centrality and
whole-graph topology metrics used by the temporal network builder.

Edge attributes of a topic graph:
    correlation: signed rank correlation between the two topics
    weight:      |correlation|, link strength for PageRank, Infomap and modularity
    distance:    1 / |correlation|, link length for weighted shortest paths

Distance conventions on disconnected graphs: hop distances are only measured inside connected
components. Diameter is the largest component diameter, radius the smallest component radius, and mean
distance averages over all ordered pairs of distinct nodes that can reach each other.
"""

import logging
import random
import threading

import igraph as ig
import networkx as nx

logger = logging.getLogger(__name__)

_IGRAPH_RNG_LOCK = threading.Lock()


# ============================================================================
# Network Construction
# ============================================================================

def build_topic_graph(edges, prevalence=None):
    """
    Build an undirected weighted topic graph from (topic_a, topic_b, correlation) triples.
    Self-loops and pairs with zero correlation are skipped, so a window whose retained pairs all have
    zero correlation yields an edgeless graph.

    Args:
        edges: Iterable of (topic_a, topic_b, correlation)
        prevalence: Optional dict {topic: summed probability mass}; endpoints without an entry get 0.0

    Returns:
        NetworkX Graph with node attribute 'prevalence' and edge attributes correlation/weight/distance
    """
    prevalence = prevalence or {}
    G = nx.Graph()
    for topic_a, topic_b, correlation in edges:
        if topic_a == topic_b:
            continue
        strength = abs(float(correlation))
        if strength == 0:
            # Zero-strength pairs carry no link weight and have infinite length
            continue
        G.add_edge(
            topic_a, topic_b,
            correlation=float(correlation),
            weight=strength,
            distance=1.0 / strength,
        )

    missing = [node for node in G.nodes if node not in prevalence]
    if missing:
        logger.warning(f"No prevalence for topic(s) {sorted(map(str, missing))}, using 0.0")
    nx.set_node_attributes(G, {node: float(prevalence.get(node, 0.0)) for node in G.nodes}, 'prevalence')
    return G


def sorted_nodes(G):
    """Nodes in a reproducible order, independent of edge insertion order."""
    try:
        return sorted(G.nodes)
    except TypeError:
        # Mixed label types
        return sorted(G.nodes, key=str)


def to_igraph(G, nodes=None):
    """Convert a networkx topic graph to igraph, vertices in the given node order."""
    nodes = list(nodes) if nodes is not None else sorted_nodes(G)
    index = {node: i for i, node in enumerate(nodes)}
    edge_list = sorted((min(index[u], index[v]), max(index[u], index[v])) for u, v in G.edges)
    edge_weights = [G[nodes[a]][nodes[b]]['weight'] for a, b in edge_list]
    node_weights = [G.nodes[node]['prevalence'] for node in nodes]
    return ig.Graph(n=len(nodes), edges=edge_list, directed=False,
                    edge_attrs={'weight': edge_weights},
                    vertex_attrs={'name': [str(n) for n in nodes], 'prevalence': node_weights})


# ============================================================================
# Community Detection and Analysis
# ============================================================================

def assign_infomap_communities(G, trials=10, random_state=42):
    """
    Partition the topic graph with Infomap, driven by edge weight and node prevalence.

    Prevalence is only used as vertex weight when every node has positive prevalence.
    Community labels are canonical: numbered from 0 in order of first appearance over sorted nodes.

    igraph keeps one process-wide random number generator. It is seeded for the duration of the call
    (calls are serialized by a module lock) and then reset to the `random` module, igraph's default,
    so a generator installed earlier by the caller is not restored.

    :param G: topic graph from build_topic_graph
    :param trials: number of Infomap attempts, the best partition is kept
    :param random_state: seed for igraph's random number generator
    :return: A dictionary of node: community label.
    """
    nodes = sorted_nodes(G)
    if not nodes:
        return {}
    G_ig = to_igraph(G, nodes)
    vertex_weights = 'prevalence' if all(w > 0 for w in G_ig.vs['prevalence']) else None
    if vertex_weights is None:
        logger.debug("Non-positive prevalence present, running Infomap without vertex weights")

    with _IGRAPH_RNG_LOCK:
        ig.set_random_number_generator(random.Random(random_state))
        try:
            membership = G_ig.community_infomap(edge_weights='weight', vertex_weights=vertex_weights,
                                                trials=trials).membership
        finally:
            ig.set_random_number_generator(random)

    relabel = {}
    for label in membership:
        relabel.setdefault(label, len(relabel))
    return {node: relabel[label] for node, label in zip(nodes, membership)}


def communities_from_labels(labels):
    """Turn {node: label} into a list of node sets, ordered by label."""
    groups = {}
    for node, label in labels.items():
        groups.setdefault(label, set()).add(node)
    return [groups[label] for label in sorted(groups)]


# ============================================================================
# Network Analysis and Metrics
# ============================================================================

def centrality_suite(G):
    """
    Per-node centrality scores.

    degree:      number of incident edges
    strength:    sum of incident |correlation|
    betweenness: shortest-path betweenness over 'distance' (unnormalized pair counts)
    closeness:   closeness over 'distance' (Wasserman-Faust scaling for disconnected graphs)
    pagerank:    PageRank with |correlation| as link weight

    :return: dict {node: {metric: value}}
    """
    degree = dict(G.degree())
    strength = dict(G.degree(weight='weight'))
    betweenness = nx.betweenness_centrality(G, weight='distance', normalized=False)
    closeness = nx.closeness_centrality(G, distance='distance')
    pagerank = nx.pagerank(G, weight='weight')
    return {
        node: {
            'degree': int(degree[node]),
            'strength': float(strength[node]),
            'betweenness': float(betweenness[node]),
            'closeness': float(closeness[node]),
            'pagerank': float(pagerank[node]),
        }
        for node in G.nodes
    }


def component_distance_summary(G):
    """
    (diameter, radius, mean_distance) in hops, component-restricted.

    Graphs without any pair of distinct connected nodes give (0, 0, 0.0).
    """
    diameter = 0
    radius = None
    total_distance = 0
    reachable_pairs = 0
    for component in nx.connected_components(G):
        sub = G.subgraph(component)
        eccentricity = nx.eccentricity(sub)
        diameter = max(diameter, max(eccentricity.values()))
        component_radius = min(eccentricity.values())
        radius = component_radius if radius is None else min(radius, component_radius)
        for _, lengths in nx.all_pairs_shortest_path_length(sub):
            total_distance += sum(lengths.values())
            reachable_pairs += len(lengths) - 1
    mean_distance = total_distance / reachable_pairs if reachable_pairs else 0.0
    return int(diameter), int(radius or 0), float(mean_distance)


def topology_suite(G, communities):
    """
    Whole-graph metrics for one topic graph.

    All metrics use the unweighted structure except modularity, which weighs edges by |correlation|
    against the given partition.

    :param G: topic graph
    :param communities: list of node sets partitioning G
    :return: dict of metric: value
    """
    diameter, radius, mean_distance = component_distance_summary(G)
    if G.size(weight='weight') > 0:
        modularity = nx.community.modularity(G, communities, weight='weight')
    else:
        modularity = 0.0
    return {
        'edges': G.number_of_edges(),
        'nodes': G.number_of_nodes(),
        'diameter': diameter,
        'radius': radius,
        'mean_distance': mean_distance,
        'modularity': float(modularity),
        'transitivity': float(nx.transitivity(G)),
        'density': float(nx.density(G)),
        'communities': len(communities),
        'components': nx.number_connected_components(G),
    }
