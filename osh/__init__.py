"""OpenStack Service Handler (OSH).

Sensu event handler that toggles the administrative status of an OpenStack
compute service when a health check on its host changes:
 - check OK      -> service enabled
 - check failing -> service disabled, with the check output as the reason

One event is handled per invocation, sequentially, under a single deadline.
"""
