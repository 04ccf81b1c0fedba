import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('offers', '0001_initial'),
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='NdaAgreement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('awaiting_entrepreneur', 'Awaiting entrepreneur'), ('ready_for_sadiq', 'Ready for Sadiq'), ('invitation_sent', 'Invitation sent'), ('signed', 'Signed'), ('cancelled', 'Cancelled')], default='awaiting_entrepreneur', max_length=30)),
                ('company_signatory_name', models.CharField(max_length=255)),
                ('company_signatory_email', models.EmailField(max_length=254)),
                ('company_signatory_phone', models.CharField(max_length=20)),
                ('entrepreneur_signatory_name', models.CharField(blank=True, max_length=255)),
                ('entrepreneur_signatory_email', models.EmailField(blank=True, max_length=254)),
                ('entrepreneur_signatory_phone', models.CharField(blank=True, max_length=20)),
                ('sadiq_document_id', models.CharField(blank=True, max_length=255)),
                ('sadiq_reference_number', models.CharField(blank=True, max_length=255)),
                ('sadiq_envelope_id', models.CharField(blank=True, max_length=255)),
                ('signed_at', models.DateTimeField(blank=True, null=True)),
                ('signed_file', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ndas', to='accounts.companyprofile')),
                ('offer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ndas', to='offers.offer')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ndas', to='projects.project')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['sadiq_envelope_id'], name='nda_envelope_idx'), models.Index(fields=['sadiq_document_id'], name='nda_document_idx')],
            },
        ),
    ]
