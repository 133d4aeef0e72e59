#!/usr/bin/env python3
"""Seed sample generations for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.extensions import db
from app.models.generation import Generation
from app.services import stylesheet_service
from app.services.design_tokens import load_tokens

app = create_app()

SAMPLE_GENERATIONS = [
    {
        "prompt": "Create a simple button component",
        "template": "general",
        "code": """export default function PrimaryButton() {
  return (
    <button className="bg-primary text-primary-foreground rounded-lg px-4 py-2">
      Get started
    </button>
  );
}
""",
    },
    {
        "prompt": "A pricing card with a title, price and feature list",
        "template": "card",
        "code": """export default function PricingCard() {
  const features = ["Unlimited projects", "Priority support", "Custom domains"];
  return (
    <div className="bg-card border-border rounded-xl shadow-md p-6">
      <h3 className="text-fg">Pro</h3>
      <p className="text-muted-foreground">$19 / month</p>
      <ul>
        {features.map((feature) => (
          <li key={feature}>{feature}</li>
        ))}
      </ul>
    </div>
  );
}
""",
    },
    {
        "prompt": "Newsletter signup form with email input",
        "template": "form",
        "code": """export default function NewsletterForm() {
  const [email, setEmail] = useState("");
  return (
    <form className="bg-card rounded-lg p-4">
      <label htmlFor="email">Email</label>
      <input id="email" type="email" value={email} onChange={(e) => setEmail(e.target.value)} />
      <button type="submit" className="bg-primary text-primary-foreground rounded-md">Subscribe</button>
    </form>
  );
}
""",
    },
]


def seed():
    with app.app_context():
        db.create_all()
        if Generation.query.first():
            print("Generations already exist, skipping seed.")
            return

        tokens = load_tokens()
        for sample in SAMPLE_GENERATIONS:
            generation = Generation(
                prompt=sample["prompt"],
                template=sample["template"],
                style="default",
                status="pending",
            )
            generation.code = sample["code"]
            generation.css = stylesheet_service.generate_css(sample["code"], tokens)
            generation.attempts = 1
            generation.status = "completed"
            db.session.add(generation)
        db.session.commit()
        print(f"Seeded {len(SAMPLE_GENERATIONS)} sample generations.")


if __name__ == "__main__":
    seed()
