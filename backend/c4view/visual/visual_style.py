VISUAL_STYLE = {
    "person": {
        "shape": "round-rectangle",
        "color": "#1976D2",
        "border": "#0D47A1",
        "width": 140,
        "height": 90,
    },
    "system": {
        "shape": "round-rectangle",
        "color": "#263238",
        "border": "#37474F",
        "width": 180,
        "height": 90,
    },
    "container": {
        "shape": "round-rectangle",
        "color": "#FFFFFF",
        "border": "#455A64",
        "width": 160,
        "height": 70,
    },
    "component": {
        "shape": "round-rectangle",
        "color": "#ECEFF1",
        "border": "#607D8B",
        "width": 140,
        "height": 60,
    },
    "datastore": {
        "shape": "barrel",
        "color": "#FFFFFF",
        "border": "#546E7A",
        "width": 140,
        "height": 70,
    },
    "queue": {
        "shape": "round-rectangle",
        "color": "#FFFFFF",
        "border": "#455A64",
        "width": 140,
        "height": 60,
    },
    "deployment": {
        "shape": "rectangle",
        "color": "#F5F5F5",
        "border": "#9E9E9E",
        "width": 140,
        "height": 60,
    },
    # Governance records travel with the graph but are never drawn
    "requirement": {
        "shape": "rectangle",
        "color": "#FFFFFF",
        "border": "#BDBDBD",
        "width": 0,
        "height": 0,
        "hidden": True,
    },
    "adr": {
        "shape": "rectangle",
        "color": "#FFFFFF",
        "border": "#BDBDBD",
        "width": 0,
        "height": 0,
        "hidden": True,
    },
}

# Modifiers applied on top of the per-type entry
STATE_STYLE = {
    "collapsed": {
        "color": "#CFD8DC",
        "border_style": "dashed",
        "width": 60,
        "height": 60,
    },
    "external": {
        "color": "#9E9E9E",
        "border": "#757575",
    },
}

DEFAULT_STYLE = VISUAL_STYLE["container"]


def style_for(node_type: str) -> dict:
    return VISUAL_STYLE.get(node_type, DEFAULT_STYLE)


def node_size(node_type: str) -> tuple:
    style = style_for(node_type)
    return style["width"], style["height"]
