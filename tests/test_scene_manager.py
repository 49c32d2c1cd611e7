"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material type tracking and lookup
- Sphere addition with materials
- Convenience methods (add_*_sphere)
- Scene serialization (config, dict, JSON file)
- Scene clearing
- Kernel-side material type dispatch
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_multiple_materials(self, fresh_scene):
        """Test IDs are shared across material types in registration order."""
        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
        id2 = fresh_scene.add_dielectric_material(ior=1.5)
        id3 = fresh_scene.add_lambertian_material(albedo=(0.1, 0.8, 0.1))

        assert (id0, id1, id2, id3) == (0, 1, 2, 3)
        assert fresh_scene.get_material_count() == 4

    def test_material_validation_albedo(self, fresh_scene):
        """Test invalid albedo raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(0.5,))

    def test_metal_fuzz_clamped(self, fresh_scene):
        """Test fuzz outside [0, 1] is clamped, not rejected."""
        mat_id = fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=2.5)
        assert fresh_scene.get_material_info(mat_id).params["fuzz"] == 1.0

    def test_material_validation_ior(self, fresh_scene):
        """Test a non-positive IOR raises ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=0.0)
        assert fresh_scene.get_material_count() == 0


class TestMaterialTypeTracking:
    """Tests for material type tracking."""

    def test_get_material_info(self, fresh_scene):
        """Test getting material info by ID."""
        from pathtracer.scene.manager import MaterialType

        mat_id = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

        info = fresh_scene.get_material_info(mat_id)
        assert info is not None
        assert info.material_id == mat_id
        assert info.material_type == MaterialType.METAL
        assert info.params["albedo"] == (0.8, 0.6, 0.2)
        assert info.params["fuzz"] == 0.3
        assert fresh_scene.get_material_info(42) is None

    def test_get_material_type_python(self, fresh_scene):
        """Test host-side type lookup."""
        from pathtracer.scene.manager import MaterialType

        fresh_scene.add_dielectric_material(ior=1.5)
        assert fresh_scene.get_material_type_python(0) == MaterialType.DIELECTRIC
        assert fresh_scene.get_material_type_python(1) is None

    def test_get_material_type_kernel(self, fresh_scene):
        """Test getting material type inside a kernel."""
        from pathtracer.scene.manager import MaterialType, get_material_type

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))
        fresh_scene.add_dielectric_material(ior=1.5)

        result = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            result[0] = get_material_type(0)
            result[1] = get_material_type(1)
            result[2] = get_material_type(2)
            result[3] = get_material_type(99)  # Invalid

        test_kernel()

        assert result[0] == int(MaterialType.LAMBERTIAN)
        assert result[1] == int(MaterialType.METAL)
        assert result[2] == int(MaterialType.DIELECTRIC)
        assert result[3] == -1

    def test_get_material_type_index_kernel(self, fresh_scene):
        """Test getting the type-local index inside a kernel."""
        from pathtracer.scene.manager import get_material_type_index

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))  # id=0, lambertian[0]
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))  # id=1, metal[0]
        fresh_scene.add_lambertian_material(albedo=(0.2, 0.2, 0.8))  # id=2, lambertian[1]
        fresh_scene.add_dielectric_material(ior=1.5)  # id=3, dielectric[0]

        result = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            result[0] = get_material_type_index(0)
            result[1] = get_material_type_index(1)
            result[2] = get_material_type_index(2)
            result[3] = get_material_type_index(3)
            result[4] = get_material_type_index(99)  # Invalid

        test_kernel()

        assert result[0] == 0
        assert result[1] == 0
        assert result[2] == 1
        assert result[3] == 0
        assert result[4] == -1


class TestSphereAddition:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self, fresh_scene):
        """Test adding a sphere that references a material."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.spheres[0].material_id == mat_id

    def test_shared_material(self, fresh_scene):
        """Test many spheres may share one material."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        for k in range(3):
            fresh_scene.add_sphere(center=(k, 0, -1), radius=0.5, material_id=mat_id)

        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_material_count() == 1

    def test_negative_radius_clamped(self, fresh_scene):
        """Test a negative radius is recorded as zero."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_sphere(center=(0, 0, -1), radius=-1.0, material_id=mat_id)
        assert fresh_scene.spheres[0].radius == 0.0

    @pytest.mark.parametrize("material_id", [-1, 0, 5])
    def test_add_sphere_invalid_material(self, fresh_scene, material_id):
        """Test adding a sphere with an unknown material raises ValueError."""
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=material_id)


class TestConvenienceMethods:
    """Tests for add_*_sphere helpers."""

    def test_add_lambertian_sphere(self, fresh_scene):
        """Test add_lambertian_sphere creates both sphere and material."""
        from pathtracer.scene.manager import MaterialType

        sphere_idx, mat_id = fresh_scene.add_lambertian_sphere(
            center=(0, 0, -1), radius=0.5, albedo=(0.8, 0.3, 0.3)
        )
        assert (sphere_idx, mat_id) == (0, 0)
        assert fresh_scene.get_material_type_python(mat_id) == MaterialType.LAMBERTIAN

    def test_add_metal_sphere(self, fresh_scene):
        """Test add_metal_sphere creates both sphere and material."""
        from pathtracer.scene.manager import MaterialType

        _, mat_id = fresh_scene.add_metal_sphere(
            center=(1, 0, -1), radius=0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.1
        )
        assert fresh_scene.get_material_type_python(mat_id) == MaterialType.METAL

    def test_add_dielectric_sphere(self, fresh_scene):
        """Test add_dielectric_sphere creates both sphere and material."""
        from pathtracer.scene.manager import MaterialType

        _, mat_id = fresh_scene.add_dielectric_sphere(center=(-1, 0, -1), radius=0.5, ior=1.5)
        assert fresh_scene.get_material_type_python(mat_id) == MaterialType.DIELECTRIC


class TestSceneClearing:
    """Tests for scene clearing."""

    def test_clear_scene(self, fresh_scene):
        """Test clear removes spheres and materials."""
        fresh_scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.8, 0.8))

        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_new_manager_clears_previous_scene(self, fresh_scene):
        """Test constructing a SceneManager resets the shared fields."""
        from pathtracer.scene.manager import SceneManager

        fresh_scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
        other = SceneManager()
        assert other.get_sphere_count() == 0


class TestSceneSerialization:
    """Tests for scene serialization."""

    def _build(self, scene):
        scene.add_lambertian_sphere((0, -100.5, -1), 100.0, (0.8, 0.8, 0.0))
        scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.6, 0.2), fuzz=0.3)
        glass = scene.add_dielectric_material(ior=1.5)
        scene.add_sphere((-1, 0, -1), 0.5, glass)
        scene.add_sphere((-1, 0, -1), 0.4, glass)

    def test_to_config(self, fresh_scene):
        """Test exporting to a config object."""
        self._build(fresh_scene)
        config = fresh_scene.to_config()

        assert [m["type"] for m in config.materials] == ["lambertian", "metal", "dielectric"]
        assert config.materials[1] == {"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 0.3}
        assert len(config.spheres) == 4
        assert config.spheres[3] == {"center": [-1.0, 0.0, -1.0], "radius": 0.4, "material_id": 2}

    def test_to_dict_from_dict(self, fresh_scene):
        """Test a dict round trip rebuilds the same scene."""
        self._build(fresh_scene)
        data = fresh_scene.to_dict()

        fresh_scene.from_dict(data)

        assert fresh_scene.get_material_count() == 3
        assert fresh_scene.get_sphere_count() == 4
        assert fresh_scene.to_dict() == data

    def test_save_and_load_json(self, fresh_scene, tmp_path):
        """Test a JSON file round trip."""
        self._build(fresh_scene)
        path = tmp_path / "scene.json"
        fresh_scene.save_json(path)

        saved = json.loads(path.read_text())
        assert len(saved["spheres"]) == 4

        fresh_scene.clear()
        fresh_scene.load_json(path)
        assert fresh_scene.to_dict() == saved

    def test_load_json_invalid_file(self, fresh_scene, tmp_path):
        """Test loading a malformed file raises ValueError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid scene file"):
            fresh_scene.load_json(path)

    def test_from_config_invalid_material_type(self, fresh_scene):
        """Test an unknown material type raises ValueError."""
        from pathtracer.scene.manager import SceneConfig

        config = SceneConfig(materials=[{"type": "velvet"}], spheres=[])
        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_config(config)

    def test_from_config_sphere_with_missing_material(self, fresh_scene):
        """Test a sphere referencing a missing material raises ValueError."""
        from pathtracer.scene.manager import SceneConfig

        config = SceneConfig(
            materials=[{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            spheres=[{"center": [0, 0, -1], "radius": 0.5, "material_id": 3}],
        )
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.from_config(config)


class TestCapacity:
    """Tests for capacity information."""

    def test_capacity_constants(self):
        """Test capacity accessors report the field sizes."""
        from pathtracer.scene.manager import MAX_MATERIALS, SceneManager
        from pathtracer.scene.intersection import MAX_SPHERES

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestActiveScene:
    """Tests for tracking which manager owns the scene fields."""

    def test_new_manager_is_active(self, fresh_scene):
        """The most recently built manager owns the fields."""
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        assert fresh_scene.is_active()

    def test_direct_field_clear_deactivates(self, fresh_scene):
        """Clearing the sphere fields behind the manager's back is detected."""
        from pathtracer.scene.intersection import clear_scene

        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        clear_scene()
        assert not fresh_scene.is_active()

    def test_clear_reactivates(self, fresh_scene):
        """Clearing a replaced manager makes it the owner again."""
        from pathtracer.scene.manager import SceneManager

        other = SceneManager()
        assert not fresh_scene.is_active()

        fresh_scene.clear()
        assert fresh_scene.is_active()
        assert not other.is_active()
