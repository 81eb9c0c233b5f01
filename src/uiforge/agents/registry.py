"""Component Registry - the fixed vocabulary generated UIs may use."""

from pydantic import BaseModel, Field


class ComponentProp(BaseModel):
    """One accepted property of a component."""
    name: str
    type: str
    description: str
    required: bool = False
    values: list[str] | None = Field(default=None, description="Enumerated allowed values")


class ComponentDefinition(BaseModel):
    """An approved UI building block."""
    name: str
    description: str
    props: list[ComponentProp] = Field(default_factory=list)
    children: bool = Field(default=False, description="Whether it accepts nested content")
    example: str


COMPONENT_REGISTRY: list[ComponentDefinition] = [
    ComponentDefinition(
        name="Button",
        description="A clickable button with variants.",
        props=[
            ComponentProp(name="label", type="string", description="Text shown on the button.", required=True),
            ComponentProp(
                name="variant",
                type="string",
                description="Visual style. Default 'primary'.",
                values=["primary", "secondary", "danger", "ghost", "outline"],
            ),
            ComponentProp(
                name="size",
                type="string",
                description="Size. Default 'default'.",
                values=["default", "sm", "lg", "icon"],
            ),
            ComponentProp(name="isLoading", type="boolean", description="Show loading spinner."),
        ],
        example='<Button label="Click Me" variant="primary" />',
    ),
    ComponentDefinition(
        name="Card",
        description="A container for content.",
        props=[ComponentProp(name="title", type="string", description="Optional title for the card header.")],
        children=True,
        example='<Card title="My Card"><Row><Button label="Action" /></Row></Card>',
    ),
    ComponentDefinition(
        name="Row",
        description="A horizontal layout container with gap.",
        children=True,
        example='<Row><Button label="A" /><Button label="B" /></Row>',
    ),
    ComponentDefinition(
        name="Input",
        description="A text input field.",
        props=[
            ComponentProp(name="value", type="string", description="Input value."),
            ComponentProp(name="placeholder", type="string", description="Placeholder text."),
            ComponentProp(
                name="type",
                type="string",
                description="Input type.",
                values=["text", "password", "email", "number"],
            ),
            ComponentProp(name="onChange", type="function", description="Change handler."),
        ],
        example='<Input placeholder="Type here..." />',
    ),
    ComponentDefinition(
        name="Table",
        description="A data table. Columns are generated from the keys of the first item.",
        props=[
            ComponentProp(name="data", type="array", description="Array of objects. Keys become columns.", required=True),
            ComponentProp(name="caption", type="string", description="Optional table caption."),
        ],
        example='<Table data={[{ id: 1, name: "Alice" }, { id: 2, name: "Bob" }]} caption="Users" />',
    ),
    ComponentDefinition(
        name="Modal",
        description="A dialog window opened by its own trigger button.",
        props=[
            ComponentProp(name="triggerLabel", type="string", description="Text for the opening button.", required=True),
            ComponentProp(name="title", type="string", description="Title of the modal.", required=True),
            ComponentProp(name="description", type="string", description="Description text."),
        ],
        children=True,
        example='<Modal triggerLabel="Open" title="Details"><Row>Content</Row></Modal>',
    ),
    ComponentDefinition(
        name="Navbar",
        description="Top navigation bar acting as a page wrapper. Content goes inside it and renders below the bar.",
        props=[
            ComponentProp(name="items", type="array", description="Array of { title, href }.", required=True),
        ],
        children=True,
        example='<Navbar items={[{ title: "Home", href: "#" }]}>\n  <Card title="Page Content"><Button label="Click" /></Card>\n</Navbar>',
    ),
    ComponentDefinition(
        name="Sidebar",
        description="Side navigation layout. Wraps the main content.",
        props=[
            ComponentProp(name="items", type="array", description="Array of { title, url }.", required=True),
        ],
        children=True,
        example='<Sidebar items={[{ title: "Dashboard", url: "#" }]}><Row>Main Content</Row></Sidebar>',
    ),
    ComponentDefinition(
        name="Chart",
        description="A bar chart visualization.",
        props=[
            ComponentProp(name="data", type="array", description="Array of data objects.", required=True),
            ComponentProp(name="config", type="object", description="Maps keys to labels/colors.", required=True),
            ComponentProp(name="xKey", type="string", description="Key for the X axis.", required=True),
            ComponentProp(name="yKeys", type="array", description="Keys for the Y axis bars.", required=True),
            ComponentProp(name="type", type="string", description="Chart type. Default 'bar'.", values=["bar"]),
        ],
        example='<Chart data={[{ name: "A", val: 10 }]} config={{ val: { label: "Value", color: "blue" } }} xKey="name" yKeys={["val"]} />',
    ),
]

ALLOWED_COMPONENTS: tuple[str, ...] = tuple(c.name for c in COMPONENT_REGISTRY)

_BY_NAME = {c.name: c for c in COMPONENT_REGISTRY}


def get_component(name: str) -> ComponentDefinition | None:
    """Look up a component by exact name."""
    return _BY_NAME.get(name)


def get_component_prompt_context() -> str:
    """Condensed component reference for model prompts."""
    sections = []
    for comp in COMPONENT_REGISTRY:
        if comp.props:
            lines = []
            for p in comp.props:
                line = f"  - {p.name} ({p.type}): {p.description}"
                if p.required:
                    line += " REQUIRED."
                if p.values:
                    line += f" [{' | '.join(p.values)}]"
                lines.append(line)
            props_str = "\n".join(lines)
        else:
            props_str = "  (no configurable props)"

        sections.append(
            f"### {comp.name}\n"
            f"{comp.description}\n"
            f"Accepts children: {'yes' if comp.children else 'no'}\n"
            f"Props:\n{props_str}\n"
            f"Example:\n```jsx\n{comp.example}\n```"
        )
    return "\n\n".join(sections)
