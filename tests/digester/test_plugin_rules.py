"""Tests for PluginCreateRule and PluginDeclarationRule."""

import logging

import pytest

from digester.errors import (
    DigesterError,
    ParseError,
    PluginConfigurationError,
    PluginInvalidInputError,
)
from digester.plugins.rules import PluginCreateRule
from digester.resolver import ClassResolver
from digester.rules import BaseRule, Digester


class MarkBeginRule(BaseRule):
    """Flags the plugin object when begin() reaches it."""

    def begin(self, digester, namespace, name, attributes) -> None:
        digester.peek().seen_begin = True


class Widget:
    """Base class for plugins."""

    def __init__(self) -> None:
        self.seen_begin = False
        self.label = ""
        self.size = 0


class Slider(Widget):
    """Plugin with rules on its own class."""

    @staticmethod
    def add_rules(digester, path) -> None:
        digester.add_rule(path, MarkBeginRule())
        digester.add_bean_property_setter(f"{path}/label")


class Knob(Widget):
    """Plugin without default rules."""

    @staticmethod
    def wire(digester, path) -> None:
        digester.add_bean_property_setter(f"{path}/size")


class KnobRules:
    """Rules class for Knob named by a declaration."""

    @staticmethod
    def add_rules(digester, path) -> None:
        digester.add_bean_property_setter(f"{path}/label")


class Dial(Widget):
    """Plugin whose rules live in DialRuleInfo."""


class DialRuleInfo:
    """Conventional rules class for Dial."""

    @staticmethod
    def add_rules(digester, path) -> None:
        digester.add_rule(path, MarkBeginRule())


class Escaper(Widget):
    """Plugin whose loader registers outside its subtree."""

    @staticmethod
    def add_rules(digester, path) -> None:
        digester.add_bean_property_setter("elsewhere")


class NotAWidget:
    """Class that does not derive from Widget."""


def make_widget_like() -> str:
    """Module-level callable reachable through the class resolver."""
    return "not a widget"


class Panel:
    """Container collecting widgets."""

    def __init__(self) -> None:
        self.widgets: list = []
        self.title = ""

    def add_widget(self, widget) -> None:
        self.widgets.append(widget)


def make_digester(**plugin_options) -> Digester:
    """Create a digester wired for panel documents."""
    resolver = ClassResolver(
        {
            "com.example.Slider": Slider,
            "com.example.Knob": Knob,
            "com.example.KnobRules": KnobRules,
            "com.example.Dial": Dial,
            "com.example.Escaper": Escaper,
            "com.example.Other": NotAWidget,
            "com.example.make_widget": make_widget_like,
        }
    )
    digester = Digester(class_resolver=resolver)
    digester.add_object_create("panel", Panel)
    digester.add_plugin_declaration("panel/plugin")
    digester.add_plugin_create("panel/ext", Widget, **plugin_options)
    digester.add_set_next("panel/ext", "add_widget")
    digester.add_bean_property_setter("panel/title")
    return digester


class TestPluginResolution:
    """Tests for choosing the plugin class."""

    def test_declared_id_creates_plugin(self) -> None:
        """Test that a declared id resolves the plugin and loads its rules."""
        panel = make_digester().parse_string(
            '<panel><plugin id="x" class="com.example.Slider"/>'
            '<ext id="x"><label>Volume</label></ext></panel>'
        )

        [widget] = panel.widgets
        assert isinstance(widget, Slider)
        assert widget.label == "Volume"

    def test_plugin_rules_receive_mount_begin(self) -> None:
        """Test that plugin rules for the plugin element itself see its begin."""
        panel = make_digester().parse_string(
            '<panel><plugin id="x" class="com.example.Slider"/><ext id="x"/></panel>'
        )

        assert panel.widgets[0].seen_begin is True

    def test_class_attribute_without_declaration(self) -> None:
        """Test that the class attribute creates an implicit declaration."""
        panel = make_digester().parse_string(
            '<panel><ext class="com.example.Slider"><label>L</label></ext></panel>'
        )

        assert isinstance(panel.widgets[0], Slider)
        assert panel.widgets[0].label == "L"

    def test_class_attribute_takes_precedence_over_id(self) -> None:
        """Test that class wins when both class and id are present."""
        panel = make_digester().parse_string(
            '<panel><plugin id="x" class="com.example.Knob"/>'
            '<ext id="x" class="com.example.Slider"/></panel>'
        )

        assert isinstance(panel.widgets[0], Slider)

    def test_default_plugin_class(self) -> None:
        """Test that the default plugin is used when nothing is named."""
        panel = make_digester(default_plugin_class=Slider).parse_string(
            "<panel><ext><label>D</label></ext></panel>"
        )

        assert isinstance(panel.widgets[0], Slider)
        assert panel.widgets[0].label == "D"

    def test_undeclared_id_is_invalid_input(self) -> None:
        """Test that an unknown id aborts the parse."""
        with pytest.raises(ParseError, match=r"Plugin id \[nope\] is not defined") as exc_info:
            make_digester().parse_string('<panel><ext id="nope"/></panel>')

        assert isinstance(exc_info.value.__cause__, PluginInvalidInputError)
        assert exc_info.value.path == "panel/ext"

    def test_no_plugin_named_is_invalid_input(self) -> None:
        """Test that an element naming no plugin fails without a default."""
        with pytest.raises(ParseError, match="No plugin class specified") as exc_info:
            make_digester().parse_string("<panel><ext/></panel>")

        assert isinstance(exc_info.value.__cause__, PluginInvalidInputError)

    def test_wrong_base_class_is_configuration_error(self) -> None:
        """Test that a plugin must derive from the base class."""
        with pytest.raises(ParseError, match="does not derive from Widget") as exc_info:
            make_digester().parse_string('<panel><ext class="com.example.Other"/></panel>')

        assert isinstance(exc_info.value.__cause__, PluginConfigurationError)

    def test_non_class_plugin_is_configuration_error(self) -> None:
        """Test that a class attribute naming a function is rejected before the call."""
        with pytest.raises(ParseError, match="not a class") as exc_info:
            make_digester().parse_string(
                '<panel><ext class="com.example.make_widget"/></panel>'
            )

        assert isinstance(exc_info.value.__cause__, PluginConfigurationError)
        assert exc_info.value.path == "panel/ext"

    def test_declared_non_class_plugin_rejected(self) -> None:
        """Test that a declaration naming a function cannot be used by id."""
        with pytest.raises(ParseError, match="not a class"):
            make_digester().parse_string(
                '<panel><plugin id="f" class="com.example.make_widget" setprops="false"/>'
                '<ext id="f"/></panel>'
            )

    def test_unresolvable_declaration_class(self) -> None:
        """Test that a declaration naming an unknown class fails."""
        with pytest.raises(ParseError, match="Unable to load plugin class") as exc_info:
            make_digester().parse_string(
                '<panel><plugin id="x" class="com.example.Missing"/></panel>'
            )

        assert isinstance(exc_info.value.__cause__, PluginInvalidInputError)

    def test_declaration_requires_class(self) -> None:
        """Test that the class attribute of a declaration is mandatory."""
        with pytest.raises(ParseError, match="Mandatory attribute 'class'") as exc_info:
            make_digester().parse_string('<panel><plugin id="x"/></panel>')

        assert exc_info.value.path == "panel/plugin"
        assert isinstance(exc_info.value.__cause__, PluginInvalidInputError)

    def test_declaration_without_id_binds_class_rules(self) -> None:
        """Test that a declaration without id configures later uses of its class."""
        panel = make_digester().parse_string(
            '<panel><plugin class="com.example.Knob" method="wire"/>'
            '<ext class="com.example.Knob"><size>4</size></ext></panel>'
        )

        assert panel.widgets[0].size == 4


class TestPluginRuleDiscovery:
    """Tests for how a plugin's rules are found."""

    def test_set_properties_fallback(self) -> None:
        """Test that a plugin without rules gets its attributes as properties."""
        panel = make_digester().parse_string(
            '<panel><ext class="com.example.Knob" size="3"/></panel>'
        )

        assert panel.widgets[0].size == 3

    def test_setprops_false_disables_fallback(self) -> None:
        """Test that setprops="false" leaves the plugin without rules."""
        panel = make_digester().parse_string(
            '<panel><plugin id="k" class="com.example.Knob" setprops="false"/>'
            '<ext id="k" size="3"/></panel>'
        )

        assert panel.widgets[0].size == 0

    def test_require_rules_rejects_plugin_without_rules(self) -> None:
        """Test that require_rules turns missing rules into an error."""
        with pytest.raises(ParseError, match="No rules found") as exc_info:
            make_digester(require_rules=True).parse_string(
                '<panel><plugin id="k" class="com.example.Knob" setprops="false"/>'
                '<ext id="k"/></panel>'
            )

        assert isinstance(exc_info.value.__cause__, PluginConfigurationError)

    def test_ruleclass_property(self) -> None:
        """Test that the ruleclass property names the rules class."""
        panel = make_digester().parse_string(
            '<panel><plugin id="k" class="com.example.Knob" ruleclass="com.example.KnobRules"/>'
            '<ext id="k"><label>From rules class</label></ext></panel>'
        )

        assert panel.widgets[0].label == "From rules class"

    def test_method_property(self) -> None:
        """Test that the method property names a rules method on the plugin."""
        panel = make_digester().parse_string(
            '<panel><plugin id="k" class="com.example.Knob" method="wire"/>'
            '<ext id="k"><size>5</size></ext></panel>'
        )

        assert panel.widgets[0].size == 5

    def test_missing_method_property_target(self) -> None:
        """Test that a method property naming nothing is a configuration error."""
        with pytest.raises(ParseError, match="has no rules method 'nothing'") as exc_info:
            make_digester().parse_string(
                '<panel><plugin id="k" class="com.example.Knob" method="nothing"/></panel>'
            )

        assert isinstance(exc_info.value.__cause__, PluginConfigurationError)

    def test_rule_info_class(self) -> None:
        """Test that <Name>RuleInfo next to the plugin class supplies rules."""
        panel = make_digester().parse_string(
            '<panel><ext class="com.example.Dial"/></panel>'
        )

        assert panel.widgets[0].seen_begin is True

    def test_rules_outside_mount_point_rejected(self) -> None:
        """Test that a loader may only register within the plugin subtree."""
        with pytest.raises(ParseError, match="must be at or below 'panel/ext'") as exc_info:
            make_digester().parse_string('<panel><ext class="com.example.Escaper"/></panel>')

        assert isinstance(exc_info.value.__cause__, PluginConfigurationError)


class TestPluginScope:
    """Tests for the rule scope installed for a plugin's subtree."""

    def test_parent_rules_do_not_apply_inside_plugin(self) -> None:
        """Test that only plugin rules fire below the plugin element."""
        digester = make_digester()
        digester.add_bean_property_setter("panel/ext/title")

        panel = digester.parse_string(
            '<panel><ext class="com.example.Slider"><title>inner</title></ext></panel>'
        )

        assert panel.title == ""
        assert panel.widgets[0].label == ""

    def test_parent_rules_restored_after_plugin(self) -> None:
        """Test that rules after the plugin element use the parent scope."""
        panel = make_digester().parse_string(
            '<panel><ext class="com.example.Slider"/><title>after</title></panel>'
        )

        assert panel.title == "after"

    def test_each_instance_gets_its_own_rules(self) -> None:
        """Test that sibling plugins of different classes keep separate rules."""
        panel = make_digester().parse_string(
            '<panel><ext class="com.example.Slider"><label>S</label></ext>'
            '<ext class="com.example.Knob" size="2"><label>K</label></ext></panel>'
        )

        slider, knob = panel.widgets
        assert slider.label == "S"
        assert knob.label == ""
        assert knob.size == 2

    def test_plugin_manager_restored(self) -> None:
        """Test that the root plugin manager is current again after the plugin."""
        seen: list = []

        class ManagerProbe(BaseRule):
            def begin(self, digester, namespace, name, attributes) -> None:
                seen.append(digester.plugin_manager)

        digester = make_digester()
        digester.add_rule("panel", ManagerProbe())
        digester.add_rule("panel/title", ManagerProbe())
        digester.parse_string('<panel><ext class="com.example.Slider"/><title/></panel>')

        assert seen[0] is seen[1]

    def test_plugin_rule_ending_out_of_order(self, digester: Digester) -> None:
        """Test that ending a plugin element outside its scope is detected."""
        with pytest.raises(DigesterError, match="not the innermost scope"):
            PluginCreateRule(Widget).end(digester, None, "ext")


class TestPluginCreateRuleOptions:
    """Tests for PluginCreateRule configuration."""

    @pytest.mark.parametrize("option", ["class_attribute", "id_attribute"])
    def test_invalid_attribute_name_rejected(self, option: str) -> None:
        """Test that attribute name overrides must be XML names."""
        with pytest.raises(PluginConfigurationError, match="Invalid attribute name"):
            PluginCreateRule(Widget, **{option: "not valid"})

    def test_custom_class_attribute(self) -> None:
        """Test that an overridden class attribute names the plugin."""
        panel = make_digester(class_attribute="kind").parse_string(
            '<panel><ext kind="com.example.Slider"><label>K</label></ext></panel>'
        )

        assert isinstance(panel.widgets[0], Slider)

    def test_rule_loading_logged_in_double_line_block(self, caplog) -> None:
        """Test that plugin rule loading is logged inside its own tree block."""
        with caplog.at_level(logging.DEBUG, logger="digester"):
            make_digester().parse_string('<panel><ext class="com.example.Slider"/></panel>')

        loading = [r.getMessage() for r in caplog.records if "Loading rules" in r.getMessage()]
        assert loading
        assert "║──" in loading[0]
