"""Tests for workflow JSON import and export."""

import json

import pytest

from workflow_designer.core.exceptions import GraphImportError
from workflow_designer.core.graph_io import export_graph, import_graph
from workflow_designer.models.core import (
    AutomatedNode,
    Position,
    StartNode,
    WorkflowGraph,
)

from graphs import approval, automated, edges, end, pair, start, task


@pytest.fixture
def sample_graph():
    """A graph touching every node kind, with one unreachable node and a cycle."""
    nodes = [
        start('S', metadata=[pair('owner', 'ops')], position=Position(x=1, y=2)),
        task('T', assignee='alice', due_date='2024-01-31', custom_fields=[pair('cost', '10')]),
        approval('A', approver_role='CFO', auto_approve_threshold=1000),
        automated('X', automation_action='call_webhook', action_params={'url': 'http://hook', 'payload': '{}'}),
        end('E', end_message='Done', summary=True),
        task('Orphan'),
    ]
    links = edges(('S', 'T'), ('T', 'A'), ('A', 'X'), ('X', 'E'), ('X', 'T'))
    return WorkflowGraph(nodes=nodes, edges=links)


class TestExport:
    """Export format."""

    def test_export_uses_camel_case(self, sample_graph):
        """Exported JSON uses the editor's field names."""
        payload = json.loads(export_graph(sample_graph))

        assert set(payload) == {'nodes', 'edges'}
        assert payload['nodes'][1]['dueDate'] == '2024-01-31'
        assert payload['nodes'][1]['customFields'] == [{'key': 'cost', 'value': '10'}]
        assert payload['nodes'][2]['autoApproveThreshold'] == 1000
        assert payload['nodes'][3]['actionParams'] == {'url': 'http://hook', 'payload': '{}'}
        assert payload['nodes'][4]['endMessage'] == 'Done'
        assert payload['nodes'][0]['kind'] == 'Start'
        assert payload['edges'][0] == {
            'id': 'e0', 'source': 'S', 'target': 'T', 'sourceHandle': None, 'targetHandle': None
        }


class TestRoundTrip:
    """Export then import reproduces engine results."""

    def test_round_trip_preserves_graph(self, sample_graph):
        """Imported graph equals the exported one."""
        restored = import_graph(export_graph(sample_graph))

        assert restored == sample_graph
        assert isinstance(restored.nodes[0], StartNode)
        assert isinstance(restored.nodes[3], AutomatedNode)

    def test_round_trip_preserves_validation(self, validator, sample_graph):
        """Validation results are identical before and after the round trip."""
        before = validator.validate(sample_graph.nodes, sample_graph.edges)
        restored = import_graph(export_graph(sample_graph))
        after = validator.validate(restored.nodes, restored.edges)

        assert before.ok is False
        assert after == before

    def test_round_trip_preserves_simulation(self, simulator, sample_graph):
        """Simulation steps are identical before and after the round trip."""
        before = simulator.simulate_graph(sample_graph)
        after = simulator.simulate_graph(import_graph(export_graph(sample_graph)))

        assert [s.node_id for s in before.steps] == ['S', 'T', 'A', 'X', 'E']
        assert after == before

    def test_import_accepts_snake_case(self):
        """Python field names are accepted as well as camelCase."""
        text = json.dumps({
            'nodes': [
                {'id': 'S', 'kind': 'Start', 'title': 'Begin'},
                {'id': 'T', 'kind': 'Task', 'due_date': 'tomorrow'},
            ],
            'edges': [{'id': 'e1', 'source': 'S', 'target': 'T', 'source_handle': 'out'}],
        })

        graph = import_graph(text)

        assert graph.nodes[1].due_date == 'tomorrow'
        assert graph.edges[0].source_handle == 'out'


class TestImportErrors:
    """Rejected documents."""

    def test_invalid_json(self):
        with pytest.raises(GraphImportError, match="Failed to parse JSON"):
            import_graph('{not json')

    @pytest.mark.parametrize('payload', [
        [],
        {'nodes': []},
        {'edges': []},
        {'nodes': {}, 'edges': []},
    ])
    def test_missing_arrays(self, payload):
        """Both nodes and edges arrays are required."""
        with pytest.raises(GraphImportError, match="must contain `nodes` and `edges` arrays"):
            import_graph(json.dumps(payload))

    def test_unknown_node_kind(self):
        """Only the five node kinds are accepted."""
        text = json.dumps({'nodes': [{'id': 'N', 'kind': 'Note'}], 'edges': []})

        with pytest.raises(GraphImportError) as exc_info:
            import_graph(text)

        assert exc_info.value.details['errors']

    def test_duplicate_node_ids(self):
        """Node IDs must be unique in an imported graph."""
        text = json.dumps({
            'nodes': [{'id': 'S', 'kind': 'Start'}, {'id': 'S', 'kind': 'End'}],
            'edges': [],
        })

        with pytest.raises(GraphImportError):
            import_graph(text)
