import jinja2


jinja_env = jinja2.Environment(
    block_start_string="{$",
    block_end_string="$}",
    variable_start_string="{{",
    variable_end_string="}}",
    line_statement_prefix="$$",
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)


PREFIX_TEMPLATE = """\
{{ version_line }}
// shader: {{ description }}
#define WR_{{ stage | upper }}_SHADER
#define WR_MAX_VERTEX_TEXTURE_WIDTH {{ max_vertex_texture_width }}U
$$ for feature in features
#define WR_FEATURE_{{ feature }}
$$ endfor
"""

_prefix_template = jinja_env.from_string(PREFIX_TEMPLATE)


def render_prefix(platform, stage, shader_id, features):
    """Render the lines that precede the shader code for one stage.

    GLSL requires the version directive to come first, followed by the defines
    for the stage and for each feature token.
    """
    features = list(features)
    description = " ".join([shader_id, ",".join(features)]).rstrip()
    return _prefix_template.render(
        version_line=platform.version_line,
        description=description,
        stage=str(stage),
        max_vertex_texture_width=1024,
        features=features,
    )
