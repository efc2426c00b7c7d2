from typing import Any, Dict, Iterable, List, Mapping, Union

from rundown.schemas.catalog import CompoundEntityRef, Entity


def get_repos_by_system(
    entities: Iterable[Union[Entity, Mapping[str, Any]]],
) -> Dict[str, List[CompoundEntityRef]]:
    """
    Group catalog entities by their spec.system tag.
    Entities without a string system are left out; catalog order is kept.
    """
    repos_by_system: Dict[str, List[CompoundEntityRef]] = {}
    for raw in entities:
        entity = raw if isinstance(raw, Entity) else Entity.model_validate(raw)
        system = entity.system
        if system is None:
            continue
        repos_by_system.setdefault(system, []).append(entity.ref())
    return repos_by_system
