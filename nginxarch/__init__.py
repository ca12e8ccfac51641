"""
nginxarch - Operator tooling for a multi-architecture nginx deployment

Two command-line tools drive nginx deployments that run on different CPU
architectures inside one Kubernetes namespace:

- nginx-util: find the pod that served a request, push the tuned
  nginx.conf into running deployments, open a shell in a pod
- nginx-bench: probe services, run wrk against one or two architectures
  at once, install btop on pods, open a shell in a pod

Architecture:
- Each module is self-contained with a clear interface
- kubectl and wrk are the only external binaries
- Configuration is passed explicitly, never read from globals

Modules:
- cluster: kubectl adapter and typed JSON patches
- resolver: service name and load-balancer endpoint lookup
- probe: HTTP probe and serving-pod extraction
- benchmark: single and dual wrk runs
- rollout: ConfigMap push, deployment patching, per-pod installs
- dispatch: verb/noun command tables and routing
- preflight: external binary presence checks
"""

__version__ = "1.0.0"
