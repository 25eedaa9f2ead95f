"""
Dispatch Tables

For each parser mode, the fixed mapping from child element local name to the
transition taken when that child opens. A transition names the mode to enter
and, unless the child is a pure structural wrapper, a factory that creates the
child's builder from the element's attributes.

Child names missing from a mode's table are skipped by the engine.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from . import builders as b
from .attributes import Attributes
from .errors import IllegalStateError
from .parser_mode import ParserMode as M
from .structures import (
    AmbientLightSource,
    BlinnShader,
    ConstantShader,
    DirectionalLightSource,
    Filter,
    IDREFArray,
    LambertShader,
    Lines,
    NameArray,
    Orthographic,
    Perspective,
    PhongShader,
    PointLightSource,
    Polylist,
    SpotLightSource,
    Triangles,
    UpAxis,
    Wrap,
)


BuilderFactory = Callable[[Attributes], b.ElementBuilder]


@dataclass(frozen=True)
class Transition:
    """Mode to enter for a child element, and how to build its value"""
    mode: M
    factory: Optional[BuilderFactory] = None

    def create_builder(self, attributes: Attributes) -> Optional[b.ElementBuilder]:
        if self.factory is None:
            return None
        return self.factory(attributes)


def _wrapper(mode: M) -> Transition:
    return Transition(mode)


def _text(mode: M) -> Transition:
    return Transition(mode, lambda attributes: b.TextBuilder(mode.tag_name))


def _enum_text(mode: M, enum_class) -> Transition:
    return Transition(mode, lambda attributes: b.EnumTextBuilder(mode.tag_name, enum_class))


def _float_value(mode: M) -> Transition:
    return Transition(mode, lambda attributes: b.FloatValueBuilder.from_attributes(mode.tag_name, attributes))


def _slot(mode: M) -> Transition:
    return Transition(mode, lambda attributes: b.SlotBuilder())


def _variant(mode: M, builder_class, variant) -> Transition:
    return Transition(mode, lambda attributes: builder_class(variant))


def _table(*transitions: Transition) -> Dict[str, Transition]:
    return {transition.mode.tag_name: transition for transition in transitions}


# Children shared by several modes

_COLOR_OR_TEXTURE = _table(
    Transition(M.SHADING_COLOR, b.ShadingColorBuilder.from_attributes),
    Transition(M.TEXTURE, b.texture_from_attributes),
)

_FLOAT_OR_PARAM = _table(
    Transition(M.FLOAT, lambda attributes: b.ShadingFloatBuilder.from_attributes('float', attributes)),
    Transition(M.PARAM_REF, b.param_ref_from_attributes),
)

_SHADER_BASE = (
    _slot(M.EMISSION),
    _slot(M.REFLECTIVE),
    _slot(M.REFLECTIVITY),
    _slot(M.TRANSPARENT),
    _slot(M.TRANSPARENCY),
    _slot(M.INDEX_OF_REFRACTION),
)

_LAMBERT_SHADER = _table(*_SHADER_BASE, _slot(M.AMBIENT), _slot(M.DIFFUSE))

_PHONG_SHADER = _table(*_SHADER_BASE, _slot(M.AMBIENT), _slot(M.DIFFUSE),
                       _slot(M.SPECULAR), _slot(M.SHININESS))

_POINT_LIGHT = _table(
    Transition(M.LIGHT_COLOR, b.light_color_from_attributes),
    _float_value(M.CONSTANT_ATTENUATION),
    _float_value(M.LINEAR_ATTENUATION),
    _float_value(M.QUADRATIC_ATTENUATION),
)

_PROJECTION_BASE = (
    _float_value(M.ASPECT_RATIO),
    _float_value(M.ZNEAR),
    _float_value(M.ZFAR),
)

_PRIMITIVE_CHILDREN = (
    Transition(M.PRIMITIVE_INPUT, b.shared_input_from_attributes),
    Transition(M.PRIMITIVE_P, lambda attributes: b.PrimitiveDataBuilder()),
)


DISPATCH_TABLE: Dict[M, Dict[str, Transition]] = {
    M.ROOT: _table(
        Transition(M.COLLADA, b.DocumentBuilder.from_attributes),
    ),
    M.COLLADA: _table(
        Transition(M.ASSET, lambda attributes: b.AssetBuilder()),
        Transition(M.LIBRARY_IMAGES, b.LibraryBuilder.from_attributes),
        Transition(M.LIBRARY_MATERIALS, b.LibraryBuilder.from_attributes),
        Transition(M.LIBRARY_EFFECTS, b.LibraryBuilder.from_attributes),
        Transition(M.LIBRARY_GEOMETRIES, b.LibraryBuilder.from_attributes),
        Transition(M.LIBRARY_CAMERAS, b.LibraryBuilder.from_attributes),
        Transition(M.LIBRARY_LIGHTS, b.LibraryBuilder.from_attributes),
        _wrapper(M.LIBRARY_ANIMATIONS),
        _wrapper(M.LIBRARY_VISUAL_SCENES),
    ),

    # asset
    M.ASSET: _table(
        _text(M.ASSET_CREATED),
        _text(M.ASSET_MODIFIED),
        _text(M.ASSET_TITLE),
        Transition(M.ASSET_UNIT, b.unit_from_attributes),
        _enum_text(M.ASSET_UP_AXIS, UpAxis),
    ),

    # images
    M.LIBRARY_IMAGES: _table(
        Transition(M.IMAGE, b.ImageBuilder.from_attributes),
    ),
    M.IMAGE: _table(
        Transition(M.IMAGE_INIT_FROM, b.ImageSourceBuilder.from_attributes),
    ),
    M.IMAGE_INIT_FROM: _table(
        Transition(M.IMAGE_INIT_FROM_REF, lambda attributes: b.UriTextBuilder('ref')),
    ),

    # materials
    M.LIBRARY_MATERIALS: _table(
        Transition(M.MATERIAL, b.MaterialBuilder.from_attributes),
    ),
    M.MATERIAL: _table(
        Transition(M.INSTANCE_EFFECT, b.effect_instance_from_attributes),
    ),

    # effects
    M.LIBRARY_EFFECTS: _table(
        Transition(M.EFFECT, b.EffectBuilder.from_attributes),
    ),
    M.EFFECT: _table(
        Transition(M.PROFILE_COMMON, b.CommonEffectProfileBuilder.from_attributes),
    ),
    M.PROFILE_COMMON: _table(
        Transition(M.NEWPARAM, b.CommonNewParamBuilder.from_attributes),
        Transition(M.TECHNIQUE_COMMON, b.CommonEffectTechniqueBuilder.from_attributes),
    ),
    M.NEWPARAM: _table(
        _text(M.PARAM_SEMANTIC),
        Transition(M.FLOAT_PARAM, lambda attributes: b.FloatParamBuilder()),
        Transition(M.SAMPLER2D, lambda attributes: b.Sampler2DParamBuilder()),
        Transition(M.SURFACE, b.SurfaceParamBuilder.from_attributes),
    ),
    M.SAMPLER2D: _table(
        _text(M.SAMPLER2D_SOURCE),
        Transition(M.SAMPLER2D_INSTANCE_IMAGE, b.instance_image_from_attributes),
        _enum_text(M.SAMPLER2D_MINFILTER, Filter),
        _enum_text(M.SAMPLER2D_MAGFILTER, Filter),
        _enum_text(M.SAMPLER2D_MIPFILTER, Filter),
        _enum_text(M.SAMPLER2D_WRAP_S, Wrap),
        _enum_text(M.SAMPLER2D_WRAP_T, Wrap),
    ),
    M.SURFACE: _table(
        _text(M.SURFACE_INIT_FROM),
        _text(M.SURFACE_FORMAT),
    ),
    M.TECHNIQUE_COMMON: _table(
        _variant(M.PHONG, b.ShaderBuilder, PhongShader),
        _variant(M.BLINN, b.ShaderBuilder, BlinnShader),
        _variant(M.LAMBERT, b.ShaderBuilder, LambertShader),
        _variant(M.CONSTANT, b.ShaderBuilder, ConstantShader),
    ),
    M.PHONG: _PHONG_SHADER,
    M.BLINN: _PHONG_SHADER,
    M.LAMBERT: _LAMBERT_SHADER,
    M.CONSTANT: _table(*_SHADER_BASE),
    M.EMISSION: _COLOR_OR_TEXTURE,
    M.AMBIENT: _COLOR_OR_TEXTURE,
    M.DIFFUSE: _COLOR_OR_TEXTURE,
    M.SPECULAR: _COLOR_OR_TEXTURE,
    M.REFLECTIVE: _COLOR_OR_TEXTURE,
    M.TRANSPARENT: _COLOR_OR_TEXTURE,
    M.REFLECTIVITY: _FLOAT_OR_PARAM,
    M.SHININESS: _FLOAT_OR_PARAM,
    M.TRANSPARENCY: _FLOAT_OR_PARAM,
    M.INDEX_OF_REFRACTION: _FLOAT_OR_PARAM,

    # geometries
    M.LIBRARY_GEOMETRIES: _table(
        Transition(M.GEOMETRY, b.GeometryBuilder.from_attributes),
    ),
    M.GEOMETRY: _table(
        Transition(M.MESH, lambda attributes: b.MeshBuilder()),
    ),
    M.MESH: _table(
        Transition(M.MESH_DATA_SOURCE, b.DataFlowSourceBuilder.from_attributes),
        Transition(M.VERTICES, b.VerticesBuilder.from_attributes),
        Transition(M.TRIANGLES, lambda attributes: b.PrimitiveBuilder.from_attributes('triangles', Triangles, attributes)),
        Transition(M.LINES, lambda attributes: b.PrimitiveBuilder.from_attributes('lines', Lines, attributes)),
        Transition(M.POLYLIST, lambda attributes: b.PrimitiveBuilder.from_attributes('polylist', Polylist, attributes)),
    ),
    M.MESH_DATA_SOURCE: _table(
        Transition(M.FLOAT_ARRAY, b.FloatArrayBuilder.from_attributes),
        Transition(M.NAME_ARRAY, lambda attributes: b.NameArrayBuilder.from_attributes('Name_array', attributes, NameArray)),
        Transition(M.IDREF_ARRAY, lambda attributes: b.NameArrayBuilder.from_attributes('IDREF_array', attributes, IDREFArray)),
        Transition(M.INT_ARRAY, b.IntArrayBuilder.from_attributes),
        _wrapper(M.SOURCE_TECHNIQUE_COMMON),
    ),
    M.SOURCE_TECHNIQUE_COMMON: _table(
        Transition(M.ACCESSOR, b.AccessorBuilder.from_attributes),
    ),
    M.ACCESSOR: _table(
        Transition(M.ACCESSOR_PARAM, b.accessor_param_from_attributes),
    ),
    M.VERTICES: _table(
        Transition(M.VERTICES_INPUT, b.unshared_input_from_attributes),
    ),
    M.TRIANGLES: _table(*_PRIMITIVE_CHILDREN),
    M.LINES: _table(*_PRIMITIVE_CHILDREN),
    M.POLYLIST: _table(
        *_PRIMITIVE_CHILDREN,
        Transition(M.POLYLIST_VCOUNT, lambda attributes: b.PrimitiveDataBuilder()),
    ),

    # lights
    M.LIBRARY_LIGHTS: _table(
        Transition(M.LIGHT, b.LightBuilder.from_attributes),
    ),
    M.LIGHT: _table(
        _wrapper(M.LIGHT_TECHNIQUE_COMMON),
    ),
    M.LIGHT_TECHNIQUE_COMMON: _table(
        _variant(M.LIGHT_AMBIENT, b.LightSourceBuilder, AmbientLightSource),
        _variant(M.LIGHT_DIRECTIONAL, b.LightSourceBuilder, DirectionalLightSource),
        _variant(M.LIGHT_POINT, b.LightSourceBuilder, PointLightSource),
        _variant(M.LIGHT_SPOT, b.LightSourceBuilder, SpotLightSource),
    ),
    M.LIGHT_AMBIENT: _table(
        Transition(M.LIGHT_COLOR, b.light_color_from_attributes),
    ),
    M.LIGHT_DIRECTIONAL: _table(
        Transition(M.LIGHT_COLOR, b.light_color_from_attributes),
    ),
    M.LIGHT_POINT: _POINT_LIGHT,
    M.LIGHT_SPOT: {
        **_POINT_LIGHT,
        **_table(
            _float_value(M.FALLOFF_ANGLE),
            _float_value(M.FALLOFF_EXPONENT),
        ),
    },

    # cameras
    M.LIBRARY_CAMERAS: _table(
        Transition(M.CAMERA, b.CameraBuilder.from_attributes),
    ),
    M.CAMERA: _table(
        _wrapper(M.OPTICS),
    ),
    M.OPTICS: _table(
        _wrapper(M.OPTICS_TECHNIQUE_COMMON),
    ),
    M.OPTICS_TECHNIQUE_COMMON: _table(
        _variant(M.PERSPECTIVE, b.ProjectionBuilder, Perspective),
        _variant(M.ORTHOGRAPHIC, b.ProjectionBuilder, Orthographic),
    ),
    M.PERSPECTIVE: _table(
        _float_value(M.XFOV),
        _float_value(M.YFOV),
        *_PROJECTION_BASE,
    ),
    M.ORTHOGRAPHIC: _table(
        _float_value(M.XMAG),
        _float_value(M.YMAG),
        *_PROJECTION_BASE,
    ),
}

# An <extra> subtree is skipped wherever it appears
EXTRA_TAG = M.EXTRA.tag_name
EXTRA_TRANSITION = _wrapper(M.EXTRA)


def find_transition(mode: M, local_name: str) -> Optional[Transition]:
    """
    Get the transition for a child element opened in `mode`.

    Returns:
        The transition, or None if the child is to be skipped
    """
    if local_name == EXTRA_TAG:
        return EXTRA_TRANSITION
    return DISPATCH_TABLE.get(mode, {}).get(local_name)


def check_dispatch_table():
    """
    Verify that the dispatch table mirrors the mode grammar.

    Raises:
        IllegalStateError: If a mode has no closing tag, a transition is keyed
            by a name other than its target's tag, or a mode is unreachable
    """
    problems: List[str] = []

    for mode in M:
        if mode is not M.ROOT and not mode.tag_name:
            problems.append(f"{mode.name} has no tag name")

    for parent, children in DISPATCH_TABLE.items():
        for name, transition in children.items():
            if transition.mode.tag_name != name:
                problems.append(
                    f"{parent.name}/{name} leads to {transition.mode.name} "
                    f"which closes on {transition.mode.tag_name!r}")

    reachable: Set[M] = {M.ROOT, M.EXTRA}
    pending = [M.ROOT]
    while pending:
        mode = pending.pop()
        for transition in DISPATCH_TABLE.get(mode, {}).values():
            if transition.mode not in reachable:
                reachable.add(transition.mode)
                pending.append(transition.mode)
    for mode in M:
        if mode not in reachable:
            problems.append(f"{mode.name} is unreachable")

    if problems:
        raise IllegalStateError("Invalid dispatch table: " + "; ".join(problems))
