"""
rps_arena Package
=================

Rock-paper-scissors elimination arena: particles of three types bounce
around a square arena and convert the type they beat on contact, until a
single type survives.

- arena_core: match simulation (physics adapter, conversions, corrective
  pass, dominance and win rules, audio cues)

All tunable parameters are in arena_config.yaml.
"""
