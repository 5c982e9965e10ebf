"""Tests for the editor session."""

import pytest
from pydantic import ValidationError

from workflow_designer.core.exceptions import (
    AutomationNotFoundError,
    InvalidNodeUpdateError,
    NodeNotFoundError,
)
from workflow_designer.core.workflow_builder import WorkflowBuilder
from workflow_designer.models.core import (
    ApprovalNode,
    AutomatedNode,
    NodeKind,
    Position,
    ValidationErrorType,
    WorkflowGraph,
)

from graphs import edges, start, task


class TestNodeCreation:
    """Default node shapes and ID allocation."""

    def test_ids_are_per_session(self, catalog):
        """Two sessions allocate IDs independently."""
        first = WorkflowBuilder(catalog=catalog)
        second = WorkflowBuilder(catalog=catalog)

        assert first.add_node(NodeKind.START).id == 'node_0'
        assert first.add_node(NodeKind.END).id == 'node_1'
        assert second.add_node(NodeKind.TASK).id == 'node_0'

    def test_default_titles_and_position(self, builder):
        """Nodes are titled after their kind unless told otherwise."""
        node = builder.add_node(NodeKind.TASK, position=Position(x=10, y=20))

        assert node.title == 'Task title'
        assert node.position.x == 10
        assert builder.add_node('End', title='Done').title == 'Done'

    def test_approval_defaults(self, builder):
        """Approval starts with the Manager role and a zero threshold."""
        node = builder.add_node(NodeKind.APPROVAL)

        assert isinstance(node, ApprovalNode)
        assert node.approver_role == 'Manager'
        assert node.auto_approve_threshold == 0

    def test_automated_defaults_to_first_catalog_entry(self, builder):
        """Automated preselects the first automation with blank params."""
        node = builder.add_node(NodeKind.AUTOMATED)

        assert isinstance(node, AutomatedNode)
        assert node.automation_action == 'send_email'
        assert node.action_params == {'to': '', 'subject': '', 'body': ''}

    def test_unknown_kind_rejected(self, builder):
        """Only the five node kinds can be created."""
        with pytest.raises(ValueError):
            builder.add_node('Note')

    def test_loaded_ids_are_skipped(self, builder):
        """New IDs never collide with imported ones."""
        builder.load(WorkflowGraph(nodes=[start('node_0'), task('node_1')], edges=[]))

        assert builder.add_node(NodeKind.END).id == 'node_2'


class TestNodeUpdates:
    """Editing node attributes."""

    def test_update_node(self, builder):
        """Updates replace the node with a validated copy."""
        node = builder.add_node(NodeKind.TASK)

        updated = builder.update_node(node.id, assignee='bob', due_date='2024-06-01')

        assert updated.assignee == 'bob'
        assert builder.get_node(node.id).due_date == '2024-06-01'
        assert updated.kind == 'Task'

    def test_update_cannot_change_identity(self, builder):
        """ID and kind are kept."""
        node = builder.add_node(NodeKind.END)

        updated = builder.update_node(node.id, id='other', kind='Task', summary=True)

        assert updated.id == node.id
        assert updated.kind == 'End'
        assert updated.summary is True

    def test_update_is_validated(self, builder):
        """Invalid attribute values are rejected."""
        node = builder.add_node(NodeKind.APPROVAL)

        with pytest.raises(ValidationError):
            builder.update_node(node.id, auto_approve_threshold='lots')

    def test_update_unknown_node(self, builder):
        """Unknown IDs raise NodeNotFoundError."""
        with pytest.raises(NodeNotFoundError):
            builder.update_node('missing', title='x')

    def test_select_automation_aligns_params(self, builder):
        """Switching automation keeps shared param values and drops the rest."""
        node = builder.add_node(NodeKind.AUTOMATED)
        builder.update_node(node.id, action_params={'to': 'a@b.c', 'subject': 'Hi', 'body': 'x', 'extra': '1'})

        updated = builder.select_automation(node.id, 'send_email')
        assert updated.action_params == {'to': 'a@b.c', 'subject': 'Hi', 'body': 'x'}

        updated = builder.select_automation(node.id, 'call_webhook')
        assert updated.automation_action == 'call_webhook'
        assert updated.action_params == {'url': '', 'payload': ''}

    def test_select_unknown_automation(self, builder):
        """Automations must exist in the catalog."""
        node = builder.add_node(NodeKind.AUTOMATED)

        with pytest.raises(AutomationNotFoundError):
            builder.select_automation(node.id, 'launch_rocket')

    def test_update_rejects_unknown_attributes(self, builder):
        """Misspelled attributes raise instead of being dropped."""
        node = builder.add_node(NodeKind.TASK)

        with pytest.raises(InvalidNodeUpdateError) as exc_info:
            builder.update_node(node.id, asignee='typo')

        assert exc_info.value.details['fields'] == ['asignee']
        assert exc_info.value.status_code == 400
        assert builder.get_node(node.id).assignee == ''

    def test_update_rejects_attributes_of_other_kinds(self, builder):
        """Attributes belong to a node kind."""
        node = builder.add_node(NodeKind.START)

        with pytest.raises(InvalidNodeUpdateError):
            builder.update_node(node.id, summary=True)

    def test_update_accepts_aliases(self, builder):
        """camelCase names from the editor are accepted too."""
        node = builder.add_node(NodeKind.TASK)

        updated = builder.update_node(node.id, dueDate='2024-07-01', customFields=[{'key': 'k', 'value': 'v'}])

        assert updated.due_date == '2024-07-01'
        assert updated.custom_fields[0].key == 'k'

    def test_select_automation_requires_automated_node(self, builder):
        """Only Automated nodes can run an automation."""
        node = builder.add_node(NodeKind.TASK)

        with pytest.raises(InvalidNodeUpdateError):
            builder.select_automation(node.id, 'send_email')

        assert not hasattr(builder.get_node(node.id), 'automation_action')


class TestConnections:
    """Edge creation and deletion."""

    def test_duplicate_connection_is_ignored(self, builder):
        """Same source, target and handles returns the existing edge."""
        s = builder.add_node(NodeKind.START)
        t = builder.add_node(NodeKind.TASK)

        first = builder.connect(s.id, t.id)
        second = builder.connect(s.id, t.id)

        assert first is second
        assert len(builder.edges) == 1

    def test_different_handles_make_distinct_edges(self, builder):
        """Handles are part of the connection identity."""
        s = builder.add_node(NodeKind.START)
        t = builder.add_node(NodeKind.TASK)

        builder.connect(s.id, t.id, source_handle='a')
        builder.connect(s.id, t.id, source_handle='b')

        assert [e.id for e in builder.edges] == ['edge_0', 'edge_1']

    def test_self_loop_allowed_and_reported(self, builder):
        """Self-loops can be drawn; validation flags them as cycles."""
        s = builder.add_node(NodeKind.START)
        t = builder.add_node(NodeKind.TASK)
        builder.connect(s.id, t.id)
        builder.connect(t.id, t.id)

        result = builder.validate()

        assert [issue.type for issue in result.errors] == [ValidationErrorType.CYCLE]

    def test_remove_nodes_drops_attached_edges(self, builder):
        """Deleting a node deletes its edges."""
        s = builder.add_node(NodeKind.START)
        t = builder.add_node(NodeKind.TASK)
        e = builder.add_node(NodeKind.END)
        builder.connect(s.id, t.id)
        builder.connect(t.id, e.id)
        builder.connect(s.id, e.id)

        builder.remove_nodes([t.id])

        assert [n.id for n in builder.nodes] == [s.id, e.id]
        assert [(edge.source, edge.target) for edge in builder.edges] == [(s.id, e.id)]

    def test_remove_edges(self, builder):
        """Edges can be deleted by ID."""
        s = builder.add_node(NodeKind.START)
        e = builder.add_node(NodeKind.END)
        edge = builder.connect(s.id, e.id)

        builder.remove_edges([edge.id])

        assert builder.edges == []


class TestSession:
    """Snapshots and engine delegation."""

    def test_build_validate_and_simulate(self, builder):
        """A drawn Start -> Task -> End workflow validates and simulates."""
        s = builder.add_node(NodeKind.START)
        t = builder.add_node(NodeKind.TASK)
        e = builder.add_node(NodeKind.END)
        builder.connect(s.id, t.id)
        builder.connect(t.id, e.id)

        assert builder.validate().ok is True
        assert [step.node_id for step in builder.simulate().steps] == [s.id, t.id, e.id]

    def test_snapshot_is_independent(self, builder):
        """Later edits do not leak into an earlier snapshot."""
        builder.add_node(NodeKind.START)
        snapshot = builder.snapshot()

        builder.add_node(NodeKind.END)

        assert len(snapshot.nodes) == 1
        assert len(builder.snapshot().nodes) == 2

    def test_load_replaces_draft(self, builder):
        """Loading a graph replaces nodes and edges."""
        builder.add_node(NodeKind.APPROVAL)
        graph = WorkflowGraph(nodes=[start('S'), task('T')], edges=edges(('S', 'T')))

        builder.load(graph)

        assert [n.id for n in builder.nodes] == ['S', 'T']
        assert builder.snapshot() == graph
