"""
Icon tooling for the Dragonbane Arcane Expansion module.

Modules:
- config: environment settings and module.json lookup
- packs: pack loading / saving (JSON array or line-delimited)
- classify: spell vs item, item category heuristics
- prompts: image prompts for pack and proof icons
- generator: image backends (Stable Diffusion WebUI, OpenAI Images)
- core: pipeline orchestration
- macros: first-run import of the module's macros
"""
