# Copyright 2026 YangTree Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared pydantic configuration for the yangtree result model."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class YangModel(BaseModel):
    """Base class for all public result models.

    Attributes are snake_case in Python and camelCase when dumped with
    ``by_alias=True`` (e.g. ``source_line`` -> ``sourceLine``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
