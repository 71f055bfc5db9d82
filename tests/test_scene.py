"""
Tests for MindMapScene: sync with the view-model and touch routing
"""
import uuid
from types import SimpleNamespace

import pytest
from PySide6.QtCore import QPointF
from PySide6.QtTest import QTest

from thoughtmap.config import AppConfig
from thoughtmap.model.entities import Connection, Thought, ThoughtCategory
from thoughtmap.scene.layout import spiral_position
from thoughtmap.view.mindmap_scene import MindMapScene

EMPTY_SPOT = QPointF(-5000.0, -5000.0)


@pytest.fixture
def scene(qapp, config, view_model):
    s = MindMapScene(size=(800.0, 600.0), config=config)
    s.view_model = view_model
    return s


def pos_of(sprite):
    return sprite.pos().x(), sprite.pos().y()


class FakeViewModel(SimpleNamespace):
    """Bare collections, to feed the scene states the real view-model refuses."""

    def thought(self, thought_id):
        return next((t for t in self.thoughts if t.id == thought_id), None)


class TestSyncThoughts:

    def test_no_view_model_is_noop(self, qapp, config):
        scene = MindMapScene(config=config)
        scene.sync_with_view_model()
        assert scene.node_count == 0

    def test_adds_sprites(self, scene, view_model):
        a = view_model.add_thought("a")
        b = view_model.add_thought("b")
        scene.sync_with_view_model()
        assert scene.node_count == 2
        assert scene.thought_sprite(a.id).content == "a"
        assert scene.thought_sprite(b.id).scene() is scene

    def test_stored_position_is_used(self, scene, view_model):
        t = view_model.add_thought("placed", position=(10.0, 20.0))
        scene.sync_with_view_model()
        assert pos_of(scene.thought_sprite(t.id)) == (10.0, 20.0)

    def test_unplaced_thoughts_go_on_spiral(self, scene, view_model):
        a = view_model.add_thought("a")
        b = view_model.add_thought("b")
        scene.sync_with_view_model()
        center = (400.0, 300.0)
        assert pos_of(scene.thought_sprite(a.id)) == pytest.approx(spiral_position(0, center))
        assert pos_of(scene.thought_sprite(b.id)) == pytest.approx(spiral_position(1, center))

    def test_spiral_index_counts_sprites_on_screen(self, scene, view_model):
        view_model.add_thought("placed", position=(1.0, 1.0))
        scene.sync_with_view_model()
        t = view_model.add_thought("next")
        scene.sync_with_view_model()
        assert pos_of(scene.thought_sprite(t.id)) == pytest.approx(spiral_position(1, (400.0, 300.0)))

    def test_spiral_follows_scene_size(self, scene, view_model):
        scene.set_size((200.0, 100.0))
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        assert pos_of(scene.thought_sprite(t.id)) == pytest.approx((250.0, 50.0))

    def test_resync_keeps_same_sprites(self, scene, view_model):
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(t.id)
        scene.sync_with_view_model()
        assert scene.thought_sprite(t.id) is sprite
        assert scene.node_count == 1

    def test_resync_updates_content_and_category(self, scene, view_model):
        t = view_model.add_thought("draft")
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(t.id)
        view_model.update_thought(t, content="final", category=ThoughtCategory.TASK)
        scene.sync_with_view_model()
        assert scene.thought_sprite(t.id) is sprite
        assert sprite.content == "final"
        assert sprite.category is ThoughtCategory.TASK

    def test_resync_keeps_moved_position(self, scene, view_model):
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(t.id)
        scene.touches_began(sprite.pos())
        scene.touches_moved(QPointF(-40.0, 75.0))
        scene.touches_ended()
        view_model.add_thought("b")
        scene.sync_with_view_model()
        assert pos_of(sprite) == (-40.0, 75.0)

    def test_removes_sprites(self, scene, view_model):
        a = view_model.add_thought("a")
        b = view_model.add_thought("b")
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(a.id)
        view_model.remove_thought(a)
        scene.sync_with_view_model()
        assert scene.thought_sprite(a.id) is None
        assert sprite.scene() is None
        assert scene.thought_sprite(b.id) is not None

    def test_removing_selected_sprite_clears_selection(self, scene, view_model):
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        scene.touches_began(scene.thought_sprite(t.id).pos())
        view_model.remove_thought(t)
        scene.sync_with_view_model()
        assert scene.selected_node is None
        assert scene.dragged_node is None


class TestAnimatedRemoval:

    def test_fading_sprite_is_not_hit(self, qapp, view_model):
        scene = MindMapScene(config=AppConfig(animations_enabled=True))
        scene.view_model = view_model
        t = view_model.add_thought("a", position=(50.0, 50.0))
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(t.id)

        view_model.remove_thought(t)
        scene.sync_with_view_model()

        # Still on screen until the fade finishes, but no longer interactive
        assert sprite.scene() is scene
        assert scene.thought_sprite(t.id) is None
        assert scene.thought_sprite_at(QPointF(50.0, 50.0)) is None

    def test_appear_animation_starts_small_and_transparent(self, qapp, view_model):
        scene = MindMapScene(config=AppConfig(animations_enabled=True))
        scene.view_model = view_model
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        sprite = scene.thought_sprite(t.id)
        assert sprite.is_animating
        assert sprite.scale() == pytest.approx(0.5)
        assert sprite.opacity() == pytest.approx(0.0)

    def test_node_and_edge_detach_after_fade(self, qapp, view_model):
        scene = MindMapScene(config=AppConfig(animations_enabled=True, disappear_duration_ms=50))
        scene.view_model = view_model
        a = view_model.add_thought("a", position=(10.0, 10.0))
        b = view_model.add_thought("b", position=(200.0, 10.0))
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        node = scene.thought_sprite(a.id)
        edge = scene.connection_edge(c.id)

        view_model.remove_thought(a)
        scene.sync_with_view_model()

        # Both fade before leaving the scene
        assert node.scene() is scene
        assert edge.scene() is scene
        assert scene.connection_edge(c.id) is None

        QTest.qWait(300)
        assert node.scene() is None
        assert edge.scene() is None
        assert edge.opacity() == pytest.approx(0.0, abs=0.05)


class TestSyncConnections:

    def test_adds_edges_between_sprites(self, scene, view_model):
        a = view_model.add_thought("a", position=(0.0, 10.0))
        b = view_model.add_thought("b", position=(100.0, 10.0))
        c = view_model.add_connection(a, b, strength=0.25)
        scene.sync_with_view_model()
        edge = scene.connection_edge(c.id)
        assert edge.source is scene.thought_sprite(a.id)
        assert edge.target is scene.thought_sprite(b.id)
        assert edge.strength == 0.25
        assert edge.pen().widthF() == pytest.approx(1.75)

    def test_edge_is_drawn_below_nodes(self, scene, view_model):
        a, b = view_model.add_thought("a"), view_model.add_thought("b")
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        assert scene.connection_edge(c.id).zValue() < scene.thought_sprite(a.id).zValue()

    def test_removed_connection_drops_edge(self, scene, view_model):
        a, b = view_model.add_thought("a"), view_model.add_thought("b")
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        edge = scene.connection_edge(c.id)
        view_model.remove_connection(c)
        scene.sync_with_view_model()
        assert scene.connection_edge(c.id) is None
        assert edge.scene() is None

    def test_deleted_endpoint_drops_edge(self, scene, view_model):
        a, b = view_model.add_thought("a"), view_model.add_thought("b")
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        view_model.remove_thought(a)
        scene.sync_with_view_model()
        assert scene.connection_edge(c.id) is None
        assert scene.edge_count == 0

    def test_missing_endpoint_sprite_is_skipped_then_retried(self, qapp, config):
        a = Thought("a", position_x=1.0, position_y=1.0)
        b = Thought("b", position_x=2.0, position_y=2.0)
        connection = Connection(a, b)
        fake = FakeViewModel(thoughts=[a], connections=[connection], selected_thought=None)

        scene = MindMapScene(config=config)
        scene.view_model = fake
        scene.sync_with_view_model()
        assert scene.connection_edge(connection.id) is None

        fake.thoughts.append(b)
        scene.sync_with_view_model()
        assert scene.connection_edge(connection.id) is not None

    def test_null_endpoint_is_skipped(self, qapp, config):
        a = Thought("a", position_x=1.0, position_y=1.0)
        connection = Connection(a, None)
        scene = MindMapScene(config=config)
        scene.view_model = FakeViewModel(thoughts=[a], connections=[connection], selected_thought=None)
        scene.sync_with_view_model()
        assert scene.edge_count == 0

    def test_strength_change_updates_pen(self, scene, view_model):
        a, b = view_model.add_thought("a"), view_model.add_thought("b")
        c = view_model.add_connection(a, b, strength=0.0)
        scene.sync_with_view_model()
        c.strength = 1.0
        scene.sync_with_view_model()
        assert scene.connection_edge(c.id).pen().widthF() == pytest.approx(4.0)


class TestTouchRouting:

    def test_tap_selects_node(self, scene, view_model):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        sprite = scene.thought_sprite(t.id)
        assert sprite.is_selected
        assert scene.selected_node is sprite
        assert view_model.selected_thought is t

    def test_tap_near_edge_of_node_still_hits(self, scene, view_model):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0 + 60.0, 100.0 + 20.0))
        assert view_model.selected_thought is t

    def test_tap_other_node_moves_selection(self, scene, view_model):
        a = view_model.add_thought("a", position=(100.0, 100.0))
        b = view_model.add_thought("b", position=(400.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_ended()
        scene.touches_began(QPointF(400.0, 100.0))
        assert not scene.thought_sprite(a.id).is_selected
        assert scene.thought_sprite(b.id).is_selected
        assert view_model.selected_thought is b

    def test_tap_empty_space_deselects(self, scene, view_model, recorder):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_ended()
        taps = recorder(scene.node_tapped)
        scene.touches_began(EMPTY_SPOT)
        assert not scene.thought_sprite(t.id).is_selected
        assert scene.selected_node is None
        assert view_model.selected_thought is None
        assert taps.calls == [(None,)]

    def test_drag_moves_node_and_updates_view_model(self, scene, view_model):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_moved(QPointF(250.0, -30.0))
        assert pos_of(scene.thought_sprite(t.id)) == (250.0, -30.0)
        assert t.position == (250.0, -30.0)

    def test_drag_refreshes_edges(self, scene, view_model):
        a = view_model.add_thought("a", position=(100.0, 100.0))
        b = view_model.add_thought("b", position=(400.0, 100.0))
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_moved(QPointF(120.0, 300.0))
        start = scene.connection_edge(c.id).path().pointAtPercent(0.0)
        assert (start.x(), start.y()) == pytest.approx((120.0, 300.0))

    def test_move_without_drag_does_nothing(self, scene, view_model, recorder):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        moved = recorder(view_model.position_changed)
        scene.touches_moved(QPointF(5.0, 5.0))
        assert pos_of(scene.thought_sprite(t.id)) == (100.0, 100.0)
        assert moved.count == 0

    def test_end_clears_drag_but_keeps_selection(self, scene, view_model):
        t = view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_ended()
        assert scene.dragged_node is None
        assert view_model.selected_thought is t
        scene.touches_moved(QPointF(0.0, 0.0))
        assert t.position == (100.0, 100.0)

    def test_cancel_clears_drag(self, scene, view_model):
        view_model.add_thought("a", position=(100.0, 100.0))
        scene.sync_with_view_model()
        scene.touches_began(QPointF(100.0, 100.0))
        scene.touches_cancelled()
        assert scene.dragged_node is None

    def test_routing_without_view_model(self, qapp, config):
        scene = MindMapScene(config=config)
        fake = FakeViewModel(thoughts=[Thought("a", position_x=10.0, position_y=10.0)],
                             connections=[], selected_thought=None)
        scene.view_model = fake
        scene.sync_with_view_model()
        scene.view_model = None
        scene.touches_began(QPointF(10.0, 10.0))
        scene.touches_moved(QPointF(30.0, 30.0))
        assert pos_of(scene.dragged_node) == (30.0, 30.0)

    def test_select_thought_from_outside(self, scene, view_model):
        t = view_model.add_thought("a")
        scene.sync_with_view_model()
        scene.select_thought(t.id)
        assert scene.thought_sprite(t.id).is_selected
        scene.select_thought(None)
        assert not scene.thought_sprite(t.id).is_selected
        scene.select_thought(uuid.uuid4())
        assert scene.selected_node is None


class TestFrameLoop:

    def test_update_frame_follows_programmatic_moves(self, scene, view_model):
        a = view_model.add_thought("a", position=(0.0, 1.0))
        b = view_model.add_thought("b", position=(200.0, 1.0))
        c = view_model.add_connection(a, b)
        scene.sync_with_view_model()
        scene.thought_sprite(b.id).setPos(QPointF(200.0, 400.0))
        scene.update_frame()
        end = scene.connection_edge(c.id).path().pointAtPercent(1.0)
        assert (end.x(), end.y()) == pytest.approx((200.0, 400.0))
