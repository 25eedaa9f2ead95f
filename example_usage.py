#!/usr/bin/env python3
"""
Example usage of the COLLADA Module

This script demonstrates how to load a COLLADA document, walk its libraries
and reshape an accessor-described source into a numpy tuple array.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(__file__))

from collada_module import ColladaHandler, ColladaReader, COLLADA_NAMESPACE_1_4


SAMPLE_DAE = f"""<COLLADA xmlns="{COLLADA_NAMESPACE_1_4}" version="1.4.1">
  <asset><up_axis>Y_UP</up_axis></asset>
  <library_effects>
    <effect id="red-effect">
      <profile_COMMON>
        <technique sid="common">
          <lambert><diffuse><color>0.8 0 0 1</color></diffuse></lambert>
        </technique>
      </profile_COMMON>
    </effect>
  </library_effects>
  <library_geometries>
    <geometry id="triangle" name="Triangle">
      <mesh>
        <source id="triangle-positions">
          <float_array id="triangle-positions-array" count="9">0 0 0  1 0 0  0 1 0</float_array>
          <technique_common>
            <accessor source="#triangle-positions-array" count="3" stride="3">
              <param name="X" type="float"/>
              <param name="Y" type="float"/>
              <param name="Z" type="float"/>
            </accessor>
          </technique_common>
        </source>
        <vertices id="triangle-vertices">
          <input semantic="POSITION" source="#triangle-positions"/>
        </vertices>
        <triangles count="1">
          <input semantic="VERTEX" source="#triangle-vertices" offset="0"/>
          <p>0 1 2</p>
        </triangles>
      </mesh>
    </geometry>
  </library_geometries>
  <library_lights>
    <light id="sun">
      <technique_common>
        <directional><color>1 1 0.9</color></directional>
      </technique_common>
    </light>
  </library_lights>
</COLLADA>
"""


def demonstrate_basic_usage():
    """Demonstrate basic COLLADA loading"""
    print("=== Basic COLLADA Loading Demo ===")

    reader = ColladaReader()
    if not reader.load_from_string(SAMPLE_DAE):
        print(f"[FAIL] Failed to load COLLADA: {reader.last_error}")
        return

    document = reader.get_document()
    print("[OK] COLLADA loaded successfully!")
    print(f"  - Version: {document.version}")
    print(f"  - Up axis: {document.asset.up_axis.value}")
    print(f"  - {document}")

    for effect in document.iter_effects():
        shader = effect.profiles[0].technique.shader
        print(f"  - Effect {effect.id}: {type(shader).__name__}, diffuse={shader.diffuse.color}")

    for light in document.iter_lights():
        print(f"  - Light {light.id}: {type(light.source).__name__}, color={light.source.color}")

    print()


def demonstrate_mesh_access():
    """Demonstrate reading mesh data through its accessor"""
    print("=== Mesh Access Demo ===")

    document = ColladaReader().parse_string(SAMPLE_DAE)
    mesh = next(document.iter_geometries()).geometric

    for source in mesh.sources:
        accessor = source.accessor
        values = source.array.values
        if len(values) < accessor.required_length():
            print(f"  - {source.id}: array too short for its accessor")
            continue
        tuples = values[accessor.offset:accessor.offset + accessor.count * accessor.stride]
        tuples = tuples.reshape(accessor.count, accessor.stride)[:, :len(accessor.params)]
        print(f"  - {source.id}: {accessor.count} x {[p.name for p in accessor.params]}")
        print(f"{tuples}")

    for primitive in mesh.primitives:
        print(f"  - {type(primitive).__name__}: count={primitive.count}, indices={primitive.data.values.tolist()}")

    print()


def demonstrate_event_api():
    """Demonstrate driving the engine with events from any source"""
    print("=== Event API Demo ===")

    handler = ColladaHandler()
    handler.start_element('COLLADA', {'version': '1.5.0'})
    handler.start_element('library_cameras', {})
    handler.start_element('camera', {'id': 'ortho-camera'})
    for name in ('optics', 'technique_common', 'orthographic', 'xmag'):
        handler.start_element(name, {})
    # Text may arrive in arbitrary fragments
    handler.text("1")
    handler.text("0.5")
    for name in ('xmag', 'orthographic', 'technique_common', 'optics', 'camera', 'library_cameras', 'COLLADA'):
        handler.end_element(name)

    camera = next(handler.get_document().iter_cameras())
    print(f"  - Camera {camera.id}: xmag={camera.projection.xmag.value}")
    print()


def main():
    """Run all demonstrations"""
    print("COLLADA Module Examples")
    print("=" * 50)
    print()

    demonstrate_basic_usage()
    demonstrate_mesh_access()
    demonstrate_event_api()

    print("=== Examples Complete ===")


if __name__ == "__main__":
    main()
