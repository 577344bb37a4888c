from langgraph.graph import END, START, StateGraph

from interview_analysis.agents import (
    coach_node,
    job_fit_analyzer_node,
    preparation_analyzer_node,
    response_analyzer_node,
    resume_analyzer_node,
)
from interview_analysis.schemas import ResultsAnalysisState

ANALYZERS = {
    "response_analyzer": response_analyzer_node,
    "resume_analyzer": resume_analyzer_node,
    "job_fit_analyzer": job_fit_analyzer_node,
    "preparation_analyzer": preparation_analyzer_node,
}


def build_results_analysis_graph() -> StateGraph:
    workflow = StateGraph(ResultsAnalysisState)

    for name, node in ANALYZERS.items():
        workflow.add_node(name, node)
        workflow.add_edge(START, name)
    workflow.add_node("coach", coach_node)

    # Coaching waits for every analyzer in the same superstep.
    workflow.add_edge(list(ANALYZERS), "coach")
    workflow.add_edge("coach", END)

    return workflow


_compiled_graph = None


def get_compiled_graph():
    global _compiled_graph
    if _compiled_graph is None:
        _compiled_graph = build_results_analysis_graph().compile()
    return _compiled_graph
