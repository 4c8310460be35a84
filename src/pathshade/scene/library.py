"""Named material library on top of the material registry.

The library is the host-side view of the scene's materials: it validates
descriptions, registers them in the Taichi fields, and keeps the mapping from
names to material ids so a scene loader can refer to materials by name.

It also handles configuration: libraries round-trip through plain
dictionaries and JSON files of the form

    {"materials": [
        {"name": "white", "type": "diffuse", "kd": [0.725, 0.71, 0.68]},
        {"name": "gold", "type": "microfacet", "ks": [1.0, 0.782, 0.344],
         "roughness": 0.3}
    ]}

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathshade.scene.library import MaterialLibrary
    >>> library = MaterialLibrary()
    >>> white = library.add_diffuse("white", kd=(0.725, 0.71, 0.68))
    >>> gold = library.add_microfacet("gold", ks=(1.0, 0.782, 0.344), roughness=0.3)
    >>> library.get_id("gold")
    1
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pathshade.materials.material import Color, MaterialKind, MaterialSpec
from pathshade.materials.registry import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
)

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        name: The unique name of the material.
        material_id: The id in the material registry.
        spec: The material description as registered.
    """

    name: str
    material_id: int
    spec: MaterialSpec


@dataclass
class LibraryConfig:
    """Configuration for library serialization.

    Attributes:
        materials: List of material configurations. Each entry holds a
            ``name`` plus the keys accepted by ``MaterialSpec.from_dict``.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)


class MaterialLibrary:
    """Named materials registered for rendering.

    Creating a library clears the material registry, so material ids always
    start at 0 and follow insertion order. The registry is global, so only one
    library may be live at a time: ids held by an older library point at the
    newer library's materials once it is created.

    Attributes:
        materials: List of MaterialInfo in registration order.
    """

    def __init__(self) -> None:
        """Initialize an empty library."""
        self.materials: list[MaterialInfo] = []
        self._by_name: dict[str, MaterialInfo] = {}
        self.clear()

    def clear(self) -> None:
        """Remove all materials from the library and the registry."""
        clear_materials()
        self.materials.clear()
        self._by_name.clear()

    def __len__(self) -> int:
        return len(self.materials)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> list[str]:
        """Material names in registration order."""
        return [info.name for info in self.materials]

    # =========================================================================
    # Material Management
    # =========================================================================

    def add(self, name: str, spec: MaterialSpec) -> int:
        """Register a material under a name.

        Args:
            name: Unique name of the material.
            spec: The validated material description.

        Returns:
            The material id to use in kernels.

        Raises:
            ValueError: If the name is empty or already used.
            RuntimeError: If the registry is full.
        """
        if not name:
            raise ValueError("Material name must not be empty")
        if name in self._by_name:
            raise ValueError(f"Material '{name}' already exists")

        material_id = add_material(spec)
        info = MaterialInfo(name=name, material_id=material_id, spec=spec)
        self.materials.append(info)
        self._by_name[name] = info
        return material_id

    def add_diffuse(
        self,
        name: str,
        kd: Color,
        *,
        emission: Color = (0.0, 0.0, 0.0),
    ) -> int:
        """Register a diffuse material.

        Args:
            name: Unique name of the material.
            kd: Diffuse reflectance (RGB), each component in [0, 1].
            emission: Emitted radiance (RGB). Non-zero makes it a light.

        Returns:
            The material id.
        """
        spec = MaterialSpec(kind=MaterialKind.DIFFUSE, kd=kd, emission=emission)
        return self.add(name, spec)

    def add_microfacet(
        self,
        name: str,
        ks: Color,
        roughness: float,
        *,
        kd: Color = (0.0, 0.0, 0.0),
        emission: Color = (0.0, 0.0, 0.0),
    ) -> int:
        """Register a GGX microfacet material.

        Args:
            name: Unique name of the material.
            ks: Specular reflectance at normal incidence (RGB).
            roughness: Perceptual roughness in [0, 1].
            kd: Diffuse reflectance, stored but unused by the microfacet lobe.
            emission: Emitted radiance (RGB).

        Returns:
            The material id.
        """
        spec = MaterialSpec(
            kind=MaterialKind.MICROFACET,
            kd=kd,
            ks=ks,
            roughness=roughness,
            emission=emission,
        )
        return self.add(name, spec)

    def get_id(self, name: str) -> int:
        """Get the material id for a name.

        Raises:
            KeyError: If no material has this name.
        """
        if name not in self._by_name:
            raise KeyError(f"Unknown material: {name}")
        return self._by_name[name].material_id

    def get_spec(self, key: str | int) -> MaterialSpec:
        """Get the description of a material by name or id.

        Raises:
            KeyError: If no material has this name.
            ValueError: If the id is out of range.
        """
        if isinstance(key, str):
            if key not in self._by_name:
                raise KeyError(f"Unknown material: {key}")
            return self._by_name[key].spec
        if not 0 <= key < len(self.materials):
            raise ValueError(f"Invalid material_id: {key}")
        return self.materials[key].spec

    def emitters(self) -> list[str]:
        """Names of the materials that emit light."""
        return [info.name for info in self.materials if info.spec.has_emission]

    # =========================================================================
    # Configuration
    # =========================================================================

    def to_config(self) -> LibraryConfig:
        """Export the library as a LibraryConfig."""
        materials = []
        for info in self.materials:
            entry = {"name": info.name}
            entry.update(info.spec.to_dict())
            materials.append(entry)
        return LibraryConfig(materials=materials)

    def from_config(self, config: LibraryConfig) -> None:
        """Replace the library contents with a configuration.

        Args:
            config: The configuration to load.

        Raises:
            ValueError: If an entry has no name, a duplicate name or invalid
                parameters.
            RuntimeError: If the configuration has more than MAX_MATERIALS
                entries.

        Every entry is validated before anything is replaced, so a failed
        load leaves the library and the registry unchanged.
        """
        if len(config.materials) > MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        entries: list[tuple[str, MaterialSpec]] = []
        seen: set[str] = set()
        for i, mat_config in enumerate(config.materials):
            name = mat_config.get("name")
            if not name:
                raise ValueError(f"Material entry {i} has no name")
            if name in seen:
                raise ValueError(f"Material '{name}' already exists")
            seen.add(name)
            entries.append((name, MaterialSpec.from_dict(mat_config)))

        self.clear()
        for name, spec in entries:
            self.add(name, spec)

        logger.debug("Loaded %d materials from configuration", len(self.materials))

    def to_dict(self) -> dict[str, Any]:
        """Export the library to a dictionary (for JSON serialization)."""
        return {"materials": self.to_config().materials}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load the library from a dictionary with a 'materials' key."""
        self.from_config(LibraryConfig(materials=list(data.get("materials", []))))

    def save_json(self, path: str | Path) -> None:
        """Write the library to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load_json(cls, path: str | Path) -> "MaterialLibrary":
        """Create a library from a JSON file.

        Raises:
            ValueError: If the file content is not a valid library.
        """
        data = json.loads(Path(path).read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object with a 'materials' list")

        library = cls()
        library.from_dict(data)
        logger.info("Loaded %d materials from %s", len(library), path)
        return library

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
