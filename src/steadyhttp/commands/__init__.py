"""Built-in CLI sub-commands for steadyhttp.

* :mod:`~steadyhttp.commands.request` -- ``get``, ``post``, ``put`` and
  ``delete``, registered directly on the root app.
* :mod:`~steadyhttp.commands.config` -- the ``config`` group for viewing and
  modifying the user configuration.
"""
