from typing import Iterable
import networkx as nx

from .models import Course


def build_conflict_graph(courses: Iterable[Course]) -> nx.Graph:
    """Courses that can never share an hour: same instructor or same cohort."""
    G = nx.Graph()
    courses = list(courses)
    for c in courses:
        G.add_node(c.id, duration=c.duration)
    for i in range(len(courses)):
        for j in range(i + 1, len(courses)):
            u, v = courses[i], courses[j]
            reasons = []
            if u.instructor == v.instructor:
                reasons.append('instructor')
            if u.cohort == v.cohort:
                reasons.append('cohort')
            if reasons:
                G.add_edge(u.id, v.id, reasons=tuple(reasons))
    return G


def clique_load_bound(G: nx.Graph) -> int:
    """Lower bound on distinct (day, hour) slots any timetable needs.

    Members of a clique are pairwise time-disjoint, so their durations add up.
    Seeds with the node carrying the most load in its neighbourhood and
    greedily grows the clique with the heaviest candidate adjacent to every
    member.
    """
    if G.number_of_nodes() == 0:
        return 0

    def duration(u):
        return G.nodes[u].get('duration', 1)

    def weight(u):
        return duration(u), G.degree(u)

    seed = max(G.nodes(), key=lambda u: duration(u) + sum(duration(v) for v in G.neighbors(u)))
    clique = {seed}
    candidates = set(G.neighbors(seed))
    while candidates:
        u = max(sorted(candidates), key=weight)
        clique.add(u)
        candidates = candidates.intersection(G.neighbors(u))
    return sum(duration(u) for u in clique)
