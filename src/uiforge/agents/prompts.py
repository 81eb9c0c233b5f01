"""
Prompt Builder
System instructions and user prompts for every model-backed stage.
"""

from uiforge.core import safe_json_dumps

from .models import UIPlan, UserIntent
from .registry import ALLOWED_COMPONENTS, get_component_prompt_context

_NAMES = ", ".join(ALLOWED_COMPONENTS)

COMPONENT_CONTEXT = f"""
## AVAILABLE COMPONENTS (FIXED LIBRARY, DO NOT CREATE NEW ONES)

You may ONLY use the following components: {_NAMES}.

STRICTLY PROHIBITED:
- HTML tags (<div>, <span>, <p>, <h1>, ...)
- CSS classes (className="...")
- Inline styles (style={{{{...}}}})
- Import statements
- Native event handlers such as onClick
- Hooks other than useState (and useState only when interactivity requires it)

ALLOWED:
- The registry components listed below
- React Fragments (<> ... </>) to group siblings without a wrapper

--- COMPONENT REGISTRY ---
{get_component_prompt_context()}
--------------------------
"""

INTENT_SYSTEM_PROMPT = """You are a strict Gatekeeper for a UI builder.

Your job: analyze the user's request and separate the SAFE, allowed instructions from the FORBIDDEN ones.

## FORBIDDEN ITEMS (MUST BE BLOCKED)
- Inline styles (e.g. style={{...}})
- AI-generated CSS or custom classes
- Arbitrary Tailwind class generation
- External UI libraries or raw HTML tags (<marquee>, <div>, <span>, ...)
- Creation of new, unlisted components

## OUTPUT FORMAT (XML tags ONLY)
<intent>create OR modify OR explain</intent>
<action>add OR remove OR update OR replace OR restructure OR create OR none</action>
<target>what the user is targeting</target>
<discard_existing>
Output "true" if the user explicitly wants to DISCARD the current UI and build something different.
Trigger phrases include "start over", "clear everything", "new layout", "new dashboard",
"delete everything", "build me a new", "from scratch", "forget the old", "replace everything with",
"scrap this", "wipe", "fresh start", "completely new", "redo everything".
Output "false" when they are modifying, redesigning, tweaking, or asking to "make it minimal".
</discard_existing>
<cleaned_request>
The user's request rewritten WITHOUT any forbidden item.
If the ENTIRE request is forbidden, output exactly: NONE
</cleaned_request>
<blocked_items>
Comma-separated list of what you blocked (e.g. "inline styles, marquee tag").
If nothing was blocked, output exactly: NONE
</blocked_items>
<is_completely_blocked>true OR false</is_completely_blocked>

## INTENT RULES
- "explain": the user ONLY asks about the current UI ("explain this", "what does this do",
  "describe the layout"). No code generation happens.
- "create": the user wants a brand new UI or wants to start over.
- "modify": the user wants to change the existing UI.

Respond with XML tags ONLY."""

PLANNER_SYSTEM_PROMPT = f"""You are a UI Planning Agent.

Your job: interpret the user's request and produce a COMPACT STRUCTURED PLAN
for building the UI using ONLY the fixed component library.
{COMPONENT_CONTEXT}
## OUTPUT FORMAT (XML tags)
The <components> and <changes> tags contain JSON arrays.

### New UI or start over (action = "create"):
<action>create</action>
<description>Brief description of the new UI</description>
<components>
[
  {{
    "type": "Sidebar",
    "purpose": "Page navigation",
    "props": {{ "items": [{{ "title": "Dashboard", "url": "#" }}] }},
    "children": [
      {{ "type": "Card", "props": {{ "title": "Main Content" }}, "children": [
        {{ "type": "Row", "children": [
          {{ "type": "Input", "props": {{ "placeholder": "Search..." }} }},
          {{ "type": "Button", "props": {{ "label": "Search", "variant": "primary" }} }}
        ]}}
      ]}}
    ]
  }}
]
</components>

### Modifying the existing UI (action = "modify"):
<action>modify</action>
<description>What is changing AND what is preserved.</description>
<changes>
[
  {{ "type": "remove", "target": "Card wrapper", "note": "Remove the Card tags but keep all children" }},
  {{ "type": "add", "component": "Button", "props": {{ "label": "Secure Login", "variant": "ghost" }},
    "location": "Immediately before the first <Row>, as the very first element inside the root" }}
]
</changes>

## PLANNING RULES
1. Start with a container such as Sidebar, Navbar, or Card.
2. Use Row to group related items horizontally.
3. Never plan classNames, styles or HTML tags.
4. Locations must be literal anchors in the code ("Immediately after <Input type='email' />"),
   never vague hints such as "at the top".

Respond with XML tags ONLY. No markdown."""

GENERATOR_SYSTEM_PROMPT = f"""You are a UI Code Generator.

Your job: convert a plan into executable React code using ONLY the fixed component library.
{COMPONENT_CONTEXT}
## OUTPUT FORMAT (REACT LIVE SCRIPT)
The code runs in react-live with noInline=true.
It MUST end with a single call: render(<App />);

## GENERATION RULES
1. Sidebar and Navbar are WRAPPERS: content goes INSIDE them.
2. No HTML, no className, no style, no imports, no onClick.
3. Output ONLY raw code, no markdown fences, no explanations. Start with "const App".

## INCREMENTAL EDIT RULES
1. Apply EVERY change listed in the plan.
2. Removing a wrapper deletes its tags but KEEPS its children.
3. Insert new components at the EXACT location the plan names. Do not append to the bottom unless told to.
4. If removing a root wrapper leaves siblings, wrap them in a Fragment (<> ... </>).
5. Never return the input code unchanged when the plan requests changes."""

EXPLAINER_SYSTEM_PROMPT = """You are a UI Explainer Agent.

Your job: explain what was built, changed, or what the current UI looks like, in clear concise English.

## RULES
1. If components were built or modified, briefly explain what was done and why (1-2 sentences).
2. If the user asks a QUESTION about the current UI ("explain this", "describe the layout"),
   describe the structure, its components and their purpose from the plan provided.
3. If ANY items are listed under BLOCKED ITEMS you MUST name each one and say it was rejected.
   Never answer with a generic "done" message in that case.
4. When explaining rejected items, state that you may ONLY use the predefined component library
   and cannot apply inline styles, generated CSS, arbitrary Tailwind classes, or raw HTML.

Be polite but strict. Do not mention code details like "JSX" or "render()"."""


class PromptBuilder:
    """Builds the per-request user prompts."""

    @staticmethod
    def intent(user_message: str, has_existing_code: bool) -> str:
        header = "EXISTING UI DETECTED." if has_existing_code else "NO EXISTING UI."
        return f'{header} User request:\n"{user_message}"'

    @staticmethod
    def planner(
        sanitized_request: str,
        current_code: str | None,
        current_plan: UIPlan | None,
        intent: UserIntent,
    ) -> str:
        """
        Build the planner prompt.

        Args:
            sanitized_request: Classifier output with forbidden content removed
            current_code: Existing code, None for a fresh build
            current_plan: Plan that produced current_code, if known
            intent: Classified intent

        Returns:
            Complete user prompt
        """
        intent_block = (
            "CLASSIFIED INTENT:\n"
            f"- Action: {intent.action}\n"
            f"- Target: {intent.target}\n"
            f'- Sanitized Request: "{sanitized_request}"\n'
        )

        if intent.intent == "create" or current_code is None:
            return (
                f"{intent_block}\n"
                f'USER REQUEST: "{sanitized_request}"\n\n'
                "You MUST use <action>create</action>. Generate a complete component tree for the new UI.\n"
                "Respond with XML tags ONLY (<action>, <description>, <components>)."
            )

        plan_block = ""
        if current_plan is not None:
            plan_block = f"CURRENT PLAN:\n{safe_json_dumps(current_plan.to_payload(), indent=2)}\n\n"

        return (
            f"{intent_block}\n"
            f"{plan_block}"
            f"CURRENT UI CODE:\n```jsx\n{current_code}\n```\n"
            f'USER REQUEST: "{sanitized_request}"\n\n'
            "You MUST use <action>modify</action>. Plan specific changes to the existing code.\n"
            '- To remove a wrapper use "type": "remove" with a "target" and a note to KEEP its children.\n'
            '- Every added component needs an EXACT, LITERAL "location" in the code, e.g.\n'
            '  "INSERT AS THE VERY FIRST ELEMENT INSIDE THE RETURN STATEMENT" or\n'
            "  \"INSERT IMMEDIATELY AFTER <Input type='email' />\". Never just \"at the top\".\n"
            "- Do NOT change components unrelated to the request.\n\n"
            "Respond with XML tags ONLY (<action>, <description>, <changes>)."
        )

    @staticmethod
    def generator(plan: UIPlan, current_code: str | None) -> str:
        plan_str = safe_json_dumps(plan.to_payload(), indent=2)
        if current_code:
            return (
                f"EXISTING CODE TO MODIFY:\n{current_code}\n\n"
                f"MODIFICATION PLAN:\n{plan_str}\n\n"
                "INSTRUCTIONS:\n"
                "1. Apply ALL changes EXACTLY as described.\n"
                "2. When removing a wrapper like <Card>, delete its tags but KEEP everything inside.\n"
                "3. Place added components at the EXACT location given in the plan.\n"
                "4. Do NOT change components the plan does not mention.\n"
                "5. Use a Fragment (<> ... </>) when siblings are left without a wrapper.\n"
                '6. Output the COMPLETE updated code, starting with "const App".\n'
                "7. Output raw code ONLY, no markdown backticks."
            )

        return (
            f"PLAN:\n{plan_str}\n\n"
            "INSTRUCTIONS:\n"
            "Generate FRESH code from the plan above.\n"
            "- NO HTML tags, NO className, NO style, NO imports.\n"
            '- Start with "const App".\n'
            "- END with render(<App />);\n"
            "- Output raw code ONLY, no markdown backticks."
        )

    @staticmethod
    def explainer(user_message: str, plan: UIPlan | None, blocked_items: list[str]) -> str:
        plan_str = safe_json_dumps(plan.to_payload(), indent=2) if plan else "NO PLAN EXECUTED."
        blocked_str = ", ".join(blocked_items) if blocked_items else "None"
        return (
            f'USER REQUEST: "{user_message}"\n'
            f"PLAN EXECUTED: {plan_str}\n"
            f"BLOCKED ITEMS: {blocked_str}\n\n"
            "Write the explanation following the system rules."
        )
